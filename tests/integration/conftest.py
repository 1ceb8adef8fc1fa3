"""Pytest configuration for integration tests.

Integration tests require FATSECRET_CLIENT_ID and FATSECRET_CLIENT_SECRET for
an application allowed to call the public endpoints. Profile tests also need
FATSECRET_ACCESS_TOKEN and FATSECRET_ACCESS_TOKEN_SECRET from a completed
authorization.

Run with: pytest -m integration
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from fatsecret_client import FatSecretClient, FatSecretConfig
from fatsecret_client.auth import Tenant
from fatsecret_client.models.auth import AccessToken

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

# Captured at import time; the shared autouse fixture scrubs these per test
_ENV = {
    name: os.environ.get(name)
    for name in (
        "FATSECRET_CLIENT_ID",
        "FATSECRET_CLIENT_SECRET",
        "FATSECRET_ACCESS_TOKEN",
        "FATSECRET_ACCESS_TOKEN_SECRET",
    )
}


def _get_env_or_skip(var_name: str) -> str:
    """Get environment variable or skip test."""
    value = _ENV.get(var_name)
    if not value:
        pytest.skip(f"Missing required environment variable: {var_name}")
    return value


@pytest.fixture
def integration_config() -> FatSecretConfig:
    return FatSecretConfig(
        consumer_key=_get_env_or_skip("FATSECRET_CLIENT_ID"),
        consumer_secret=_get_env_or_skip("FATSECRET_CLIENT_SECRET"),
    )


@pytest.fixture
async def public_client(integration_config: FatSecretConfig) -> AsyncIterator[FatSecretClient]:
    """Ephemeral client: nothing is written to the real config dir."""
    async with FatSecretClient.ephemeral(integration_config) as client:
        yield client


@pytest.fixture
async def profile_client(integration_config: FatSecretConfig) -> AsyncIterator[FatSecretClient]:
    tenant = Tenant.ephemeral(integration_config)
    tenant.access_token = AccessToken(
        token=_get_env_or_skip("FATSECRET_ACCESS_TOKEN"),
        token_secret=_get_env_or_skip("FATSECRET_ACCESS_TOKEN_SECRET"),
    )
    async with FatSecretClient(integration_config, tenant) as client:
        yield client
