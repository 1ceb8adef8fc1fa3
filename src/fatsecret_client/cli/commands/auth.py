"""Authentication commands."""

import webbrowser

import typer

from fatsecret_client.cli.async_runner import async_command
from fatsecret_client.cli.client_factory import get_client
from fatsecret_client.cli.config import CLIConfig
from fatsecret_client.cli.formatters import console, print_info, print_success

app = typer.Typer(no_args_is_help=True)


@app.command("setup")
@async_command
async def setup(
    ctx: typer.Context,
    consumer_key: str = typer.Option(..., prompt=True, help="FatSecret consumer key (client id)."),
    consumer_secret: str = typer.Option(
        ..., prompt=True, hide_input=True, help="FatSecret consumer secret (client secret)."
    ),
) -> None:
    """Store consumer credentials."""
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        client.auth.configure(consumer_key, consumer_secret)

    print_success(f"Credentials saved to {config.credentials_path}")


@app.command("login")
@async_command
async def login(
    ctx: typer.Context,
    no_browser: bool = typer.Option(
        False,
        "--no-browser",
        help="Don't open browser automatically.",
    ),
) -> None:
    """Authorize profile access with FatSecret OAuth.

    This command runs the out-of-band OAuth flow:
    1. Opens browser for FatSecret login
    2. Prompts for verification code
    3. Saves access token for future use
    """
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        # Step 1: Get request token
        print_info("Starting OAuth flow...")
        request_token = await client.auth.start_authorization()

        # Step 2: Open browser or show URL
        if no_browser:
            console.print("\nOpen this URL in your browser:")
            console.print(f"[link]{request_token.authorization_url}[/link]")
        else:
            print_info("Opening browser for authorization...")
            webbrowser.open(request_token.authorization_url)
            console.print("\n[dim]If browser didn't open, visit:[/dim]")
            console.print(f"[link]{request_token.authorization_url}[/link]")

        # Step 3: Get verifier from user
        console.print()
        verifier = typer.prompt("Enter the verification code from FatSecret")

        # Step 4: Exchange for access token (persisted by the client)
        print_info("Exchanging verification code for access token...")
        await client.auth.complete_authorization(verifier)

    print_success(f"Authenticated successfully! Token saved to {config.credentials_path}")


@app.command("status")
@async_command
async def status(ctx: typer.Context) -> None:
    """Check authentication status."""
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        auth_status = client.auth.status()

    console.print(f"Credentials path: {config.credentials_path}")
    console.print(f"State: [bold]{auth_status.state}[/bold]")
    if auth_status.profile_authenticated:
        print_success(auth_status.message)
    else:
        print_info(auth_status.message)


@app.command("logout")
@async_command
async def logout(ctx: typer.Context) -> None:
    """Forget the stored access token.

    Consumer credentials are kept; use 'auth setup' to replace them.
    """
    config: CLIConfig = ctx.obj

    async with get_client(config) as client:
        if not client.is_authenticated:
            print_info("No token to clear.")
            return
        client.auth.forget()

    print_success("Logged out.")
