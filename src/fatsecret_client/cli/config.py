"""CLI configuration with XDG-compliant paths."""

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from fatsecret_client.config import default_credentials_path


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@dataclass
class CLIConfig:
    """Configuration passed through Typer context.

    Attributes:
        verbose: Enable verbose output.
        credentials_path: JSON file holding consumer credentials and the
            user access token. Environment variables (FATSECRET_CLIENT_ID,
            FATSECRET_CLIENT_SECRET) override the stored consumer credentials.
    """

    verbose: bool = False
    credentials_path: Path = field(default_factory=default_credentials_path)
