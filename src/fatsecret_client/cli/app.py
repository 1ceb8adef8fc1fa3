"""Main Typer application."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from fatsecret_client.cli.config import CLIConfig
from fatsecret_client.config import default_credentials_path

# Create main app
app = typer.Typer(
    name="fatsecret-cli",
    help="FatSecret API command-line interface.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    credentials_path: Path | None = typer.Option(
        None,
        "--credentials",
        "-c",
        help="Credentials file (default: ~/.config/fatsecret-client/config.json).",
        envvar="FATSECRET_CONFIG_PATH",
    ),
) -> None:
    """FatSecret API command-line interface."""
    _configure_logging(verbose)
    ctx.obj = CLIConfig(
        verbose=verbose,
        credentials_path=credentials_path or default_credentials_path(),
    )
