"""Output formatters for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from fatsecret_client.cli.config import OutputFormat

console = Console()
error_console = Console(stderr=True)


def format_output(data: dict[str, Any] | list[dict[str, Any]], output_format: OutputFormat) -> None:
    """Print a tool result.

    Tool results are opaque nested JSON, so the table format renders only the
    top-level keys and falls back to JSON for anything nested.
    """
    rows = data if isinstance(data, list) else [data]
    if output_format == OutputFormat.JSON or any(
        isinstance(v, dict | list) for row in rows for v in row.values()
    ):
        console.print_json(json.dumps(data, default=str))
        return
    _format_table(rows, title=None, columns=None)


def _snake_to_title(s: str) -> str:
    """Convert snake_case to Title Case for table headers."""
    return " ".join(word.capitalize() for word in s.split("_"))


def _format_table(
    data: list[dict[str, Any]],
    title: str | None,
    columns: list[str] | None,
) -> None:
    """Format as rich table."""
    if not data:
        console.print("[dim]No data[/dim]")
        return

    # Get columns from first item if not specified
    if columns is None:
        columns = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")

    for col in columns:
        table.add_column(_snake_to_title(col))

    for row in data:
        table.add_row(*[str(row.get(col, "")) for col in columns])

    console.print(table)


def print_tools(tools: list[dict[str, Any]]) -> None:
    """Print the tool catalog as a table."""
    rows = [
        {
            "name": tool["name"],
            "read_only": "yes" if tool["annotations"]["readOnlyHint"] else "no",
            "description": tool["description"],
        }
        for tool in tools
    ]
    _format_table(rows, title="Tools", columns=["name", "read_only", "description"])


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    error_console.print(f"[red]Error:[/red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]i[/blue] {message}")
