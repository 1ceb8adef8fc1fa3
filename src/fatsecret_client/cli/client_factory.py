"""Client factory for CLI commands."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fatsecret_client.auth import CredentialStore
from fatsecret_client.client import FatSecretClient
from fatsecret_client.config import FatSecretConfig

if TYPE_CHECKING:
    from fatsecret_client.cli.config import CLIConfig


@asynccontextmanager
async def get_client(config: CLIConfig) -> AsyncGenerator[FatSecretClient]:
    """Create a persisted-tenant FatSecretClient for CLI use.

    Credential loading priority:
    1. Stored record (config_dir/config.json)
    2. Environment variables override stored values
       (FATSECRET_CLIENT_ID, FATSECRET_CLIENT_SECRET)

    Usage:
        async with get_client(cli_config) as client:
            result = await client.call_tool("search_foods", {...})
    """
    store = CredentialStore(path=config.credentials_path)
    client = FatSecretClient.from_store(FatSecretConfig.from_env(), store)

    async with client:
        yield client
