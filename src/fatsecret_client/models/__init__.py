"""Pydantic models for FatSecret credentials and tokens."""

from fatsecret_client.models.auth import (
    AccessToken,
    AuthState,
    AuthStatus,
    BearerToken,
    ConsumerCredentials,
    PersistedState,
    RequestToken,
)

__all__ = [
    "AccessToken",
    "AuthState",
    "AuthStatus",
    "BearerToken",
    "ConsumerCredentials",
    "PersistedState",
    "RequestToken",
]
