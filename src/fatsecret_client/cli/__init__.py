"""FatSecret CLI - Command-line interface for the FatSecret API."""

from fatsecret_client.cli.app import app

# Import command modules to register them with the app
from fatsecret_client.cli.commands import auth, server, tools

# Register sub-apps
app.add_typer(auth.app, name="auth", help="Authentication commands.")
app.add_typer(tools.app, name="tools", help="List and call API tools.")
app.command("serve")(server.serve)


def main() -> None:
    """Entry point for the CLI."""
    app()


__all__ = ["app", "main"]
