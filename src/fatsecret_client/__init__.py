"""FatSecret API client library.

Credential brokering for the FatSecret nutrition API: OAuth 1.0a signing and
three-legged authorization for profile data, a shared OAuth 2.0 token for
public data, and per-session isolation for networked use.

Example:
    from fatsecret_client import FatSecretClient, FatSecretConfig

    # Persisted credentials (~/.config/fatsecret-client/config.json),
    # FATSECRET_CLIENT_ID / FATSECRET_CLIENT_SECRET take priority
    async with FatSecretClient.from_store() as client:
        # Authenticate (first time)
        request_token = await client.auth.start_authorization()
        print(f"Visit: {request_token.authorization_url}")
        verifier = input("Enter verifier code: ")
        await client.auth.complete_authorization(verifier)

        # Public data uses the OAuth 2.0 token, profile data the user token
        foods = await client.call_tool("search_foods", {"search_expression": "apple"})
        entries = await client.call_tool("get_food_entries", {"date": "2024-01-31"})
"""

from fatsecret_client.client import FatSecretClient
from fatsecret_client.config import FatSecretConfig
from fatsecret_client.exceptions import (
    FatSecretAPIError,
    FatSecretAuthError,
    FatSecretError,
    FatSecretRateLimitError,
    FatSecretValidationError,
    NoPendingAuthorizationError,
    NotConfiguredError,
    UnauthorizedError,
    UpstreamAuthError,
    UpstreamError,
)

__version__ = "0.1.0"

__all__ = [
    # Main client
    "FatSecretClient",
    "FatSecretConfig",
    # Exceptions
    "FatSecretAPIError",
    "FatSecretAuthError",
    "FatSecretError",
    "FatSecretRateLimitError",
    "FatSecretValidationError",
    "NoPendingAuthorizationError",
    "NotConfiguredError",
    "UnauthorizedError",
    "UpstreamAuthError",
    "UpstreamError",
]
