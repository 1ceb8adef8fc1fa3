"""Remote API caller: attaches auth material and maps upstream errors."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import httpx
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fatsecret_client.auth.signing import SignaturePlacement
from fatsecret_client.exceptions import (
    FatSecretAPIError,
    FatSecretRateLimitError,
    FatSecretValidationError,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fatsecret_client.auth import FatSecretAuth, OAuth2TokenCache
    from fatsecret_client.config import FatSecretConfig

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE"})


class AuthMode(StrEnum):
    """Which credential a call is made with."""

    PUBLIC = "public"  # OAuth 2.0 bearer token, no user involved
    PROFILE = "profile"  # OAuth 1.0a signed with the user's access token


def _wait_for_rate_limit(retry_state: RetryCallState) -> float:
    """Custom wait strategy that respects Retry-After header.

    If the exception has a retry_after value, use it.
    Otherwise, fall back to exponential backoff.
    """
    exception = retry_state.outcome.exception() if retry_state.outcome else None

    if isinstance(exception, FatSecretRateLimitError) and exception.retry_after:
        wait_time = float(exception.retry_after)
        logger.info("Rate limited, waiting %s seconds (from Retry-After header)", wait_time)
        return wait_time

    # Exponential backoff: 2, 4, 8, 16... capped at 60 seconds
    exp_wait = wait_exponential(multiplier=1, min=2, max=60)
    wait_time = exp_wait(retry_state)
    logger.info("Rate limited, waiting %.1f seconds (exponential backoff)", wait_time)
    return wait_time


class RemoteAPI:
    """Uniform `invoke(method, path, params)` access to the FatSecret REST API.

    Public calls carry a bearer token from the OAuth2 cache; profile calls
    are OAuth 1.0a signed with every parameter in the query string.
    """

    def __init__(
        self,
        config: FatSecretConfig,
        auth: FatSecretAuth,
        token_cache: OAuth2TokenCache,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.auth = auth
        self.token_cache = token_cache
        self._http_client = http_client

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    @retry(
        retry=retry_if_exception_type(FatSecretRateLimitError),
        wait=_wait_for_rate_limit,
        stop=stop_after_attempt(5),
        reraise=True,
    )
    async def invoke(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        auth: AuthMode = AuthMode.PUBLIC,
        *,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated API request.

        Automatically retries on rate limit (429) with exponential backoff,
        respecting Retry-After header when provided.

        Args:
            method: HTTP method
            path: API path (e.g., "/foods/search/v5")
            params: Request parameters, sent in the query string
            auth: Credential to use
            timeout: Per-call timeout in seconds

        Returns:
            Parsed JSON response

        Raises:
            UnauthorizedError: Profile call without a user token (nothing is sent)
            FatSecretAPIError: On API error
            FatSecretRateLimitError: On rate limit (429) after max retries
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise FatSecretValidationError(f"Unsupported HTTP method: {method}", field="method")

        url = f"{self.config.api_base_url}{path}"
        query_params = {k: _stringify(v) for k, v in (params or {}).items() if v is not None}
        query_params.setdefault("format", "json")

        headers: dict[str, str] = {"Accept": "application/json"}
        if auth is AuthMode.PROFILE:
            query_params, auth_headers = self.auth.sign_request(
                method, url, query_params, SignaturePlacement.QUERY
            )
            headers.update(auth_headers)
        else:
            token = await self.token_cache.get_token(timeout=timeout)
            headers["Authorization"] = f"Bearer {token}"

        request_timeout = timeout if timeout is not None else self.config.timeout
        logger.debug("Request: %s %s", method, url)

        if self._http_client is not None:
            # Use shared connection pool
            response = await self._http_client.request(
                method, url, params=query_params, headers=headers, timeout=request_timeout
            )
        else:
            # Fallback: create per-request client (no pooling)
            async with httpx.AsyncClient(timeout=request_timeout) as client:
                response = await client.request(method, url, params=query_params, headers=headers)

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response, raising appropriate errors."""
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise FatSecretRateLimitError(
                "Rate limit exceeded",
                retry_after=int(retry_after) if retry_after else None,
            )

        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None
            if not isinstance(error_body, dict):
                error_body = None

            raise FatSecretAPIError(
                _error_message(error_body, f"API error: {response.status_code}"),
                status_code=response.status_code,
                error_code=_error_code(error_body),
                response_body=error_body,
            )

        if response.status_code == 204 or not response.content:
            return {}

        result = response.json()
        if not isinstance(result, dict):
            return {"result": result}

        # FatSecret reports some failures in a 200 body
        if "error" in result:
            raise FatSecretAPIError(
                _error_message(result, "API error"),
                status_code=response.status_code,
                error_code=_error_code(result),
                response_body=result,
            )
        return result


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _error_message(body: dict[str, Any] | None, default: str) -> str:
    if body and isinstance(body.get("error"), dict):
        return str(body["error"].get("message", default))
    return default


def _error_code(body: dict[str, Any] | None) -> str | None:
    if body and isinstance(body.get("error"), dict) and "code" in body["error"]:
        return str(body["error"]["code"])
    return None
