"""Tool catalog commands."""

import json
from typing import Any

import typer

from fatsecret_client.cli.async_runner import async_command
from fatsecret_client.cli.client_factory import get_client
from fatsecret_client.cli.config import CLIConfig, OutputFormat
from fatsecret_client.cli.formatters import format_output, print_error, print_info, print_tools
from fatsecret_client.client import HANDSHAKE_TOOLS

app = typer.Typer(no_args_is_help=True)


def _parse_arguments(pairs: list[str]) -> dict[str, Any]:
    """Parse key=value pairs; values that look like JSON are decoded."""
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}")
        try:
            arguments[key] = json.loads(value)
        except ValueError:
            arguments[key] = value
    return arguments


@app.command("list")
@async_command
async def list_tools(ctx: typer.Context) -> None:
    """List tools that can run as a single command."""
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        print_tools([t for t in client.list_tools() if t["name"] not in HANDSHAKE_TOOLS])


@app.command("call")
@async_command
async def call(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Tool name, e.g. search_foods."),
    arguments: list[str] = typer.Option(
        [],
        "--arg",
        "-a",
        help="Tool argument as key=value (repeatable).",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.JSON,
        "--output",
        "-o",
        help="Output format.",
    ),
) -> None:
    """Call a tool and print its result."""
    config: CLIConfig = ctx.obj
    parsed = _parse_arguments(arguments)

    if name in HANDSHAKE_TOOLS:
        print_error(f"{name} cannot run as a one-shot command.")
        print_info(
            "Use 'fatsecret-cli auth login', or 'fatsecret-cli serve --stdio' for an MCP client."
        )
        raise typer.Exit(1)

    async with get_client(config) as client:
        if name not in client.tool_names():
            print_error(f"Unknown tool: {name}")
            raise typer.Exit(1)
        result = await client.call_tool(name, parsed)

    format_output(result, output)
