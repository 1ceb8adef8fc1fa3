"""MCP server command."""

import asyncio

import typer

from fatsecret_client.auth import CredentialStore
from fatsecret_client.cli.config import CLIConfig
from fatsecret_client.cli.formatters import print_info
from fatsecret_client.client import FatSecretClient
from fatsecret_client.config import FatSecretConfig


def serve(
    ctx: typer.Context,
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind."),
    port: int = typer.Option(3000, "--port", "-p", help="Port to listen on.", envvar="PORT"),
    stdio: bool = typer.Option(
        False,
        "--stdio",
        help="Serve one MCP client over stdin/stdout using the stored credentials.",
    ),
) -> None:
    """Serve the MCP endpoint.

    Over HTTP every session gets an isolated tenant; consumer credentials
    come from FATSECRET_CLIENT_ID and FATSECRET_CLIENT_SECRET only and
    session state is never written to disk.

    With --stdio a single long-lived tenant is loaded from the credentials
    file, so start_auth and complete_auth can run one after the other and
    the resulting token is saved.
    """
    if stdio:
        from fatsecret_client.server import serve_stdio

        config: CLIConfig = ctx.obj
        store = CredentialStore(path=config.credentials_path)
        client = FatSecretClient.from_store(FatSecretConfig.from_env(), store)
        # stdout carries the protocol
        asyncio.run(serve_stdio(client))
        return

    from fatsecret_client.server import run

    print_info(f"Listening on http://{host}:{port}/mcp")
    run(host=host, port=port)
