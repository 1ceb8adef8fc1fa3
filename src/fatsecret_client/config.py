"""Configuration management for the FatSecret client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_config_dir() -> Path:
    """Get XDG-compliant config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "fatsecret-client"
    return Path.home() / ".config" / "fatsecret-client"


def default_credentials_path() -> Path:
    """Get the default location of the persisted credential record."""
    return _get_config_dir() / "config.json"


def _first_env(*names: str) -> str | None:
    for name in names:
        if value := os.environ.get(name):
            return value
    return None


@dataclass(frozen=True, slots=True)
class FatSecretConfig:
    """FatSecret API configuration.

    Consumer credentials are optional here: a config without them yields an
    unconfigured tenant that can still be set up at runtime.
    """

    consumer_key: str | None = None
    consumer_secret: str | None = None
    scope: str = "basic"
    token_safety_margin: float = 60.0  # seconds subtracted from OAuth2 expiry
    timeout: float = 30.0

    # API URLs
    api_base_url: str = field(default="https://platform.fatsecret.com/rest", repr=False)
    oauth1_base_url: str = field(
        default="https://authentication.fatsecret.com/oauth", repr=False
    )
    token_url: str = field(default="https://oauth.fatsecret.com/connect/token", repr=False)

    @property
    def request_token_url(self) -> str:
        return f"{self.oauth1_base_url}/request_token"

    @property
    def authorize_url(self) -> str:
        return f"{self.oauth1_base_url}/authorize"

    @property
    def access_token_url(self) -> str:
        return f"{self.oauth1_base_url}/access_token"

    @property
    def has_credentials(self) -> bool:
        """Check if both consumer key and secret are present."""
        return bool(self.consumer_key and self.consumer_secret)

    @classmethod
    def from_env(cls) -> FatSecretConfig:
        """Create config from environment variables.

        Recognised env vars:
        - FATSECRET_CLIENT_ID (or FATSECRET_CONSUMER_KEY)
        - FATSECRET_CLIENT_SECRET (or FATSECRET_CONSUMER_SECRET)
        - FATSECRET_SCOPE (default "basic")
        - FATSECRET_TOKEN_MARGIN (seconds, default 60)
        """
        margin = os.environ.get("FATSECRET_TOKEN_MARGIN")
        return cls(
            consumer_key=_first_env("FATSECRET_CLIENT_ID", "FATSECRET_CONSUMER_KEY"),
            consumer_secret=_first_env("FATSECRET_CLIENT_SECRET", "FATSECRET_CONSUMER_SECRET"),
            scope=os.environ.get("FATSECRET_SCOPE", "basic"),
            token_safety_margin=float(margin) if margin else 60.0,
        )
