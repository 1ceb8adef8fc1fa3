"""FatSecret REST API access."""

from fatsecret_client.api.base import AuthMode, RemoteAPI
from fatsecret_client.api.endpoints import (
    ENDPOINTS,
    ENDPOINTS_BY_NAME,
    Endpoint,
    Param,
    input_schema_for,
)

__all__ = [
    "ENDPOINTS",
    "ENDPOINTS_BY_NAME",
    "AuthMode",
    "Endpoint",
    "Param",
    "RemoteAPI",
    "input_schema_for",
]
