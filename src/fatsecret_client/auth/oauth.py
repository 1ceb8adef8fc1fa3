"""OAuth 1.0a three-legged authorization for the FatSecret API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import parse_qs, urlencode

import httpx

from fatsecret_client.auth.signing import SignaturePlacement, sign
from fatsecret_client.exceptions import (
    FatSecretValidationError,
    NoPendingAuthorizationError,
    UpstreamError,
)
from fatsecret_client.models.auth import (
    AccessToken,
    AuthState,
    AuthStatus,
    ConsumerCredentials,
    RequestToken,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fatsecret_client.auth.signing import OAuth1Credentials
    from fatsecret_client.auth.tenant import Tenant
    from fatsecret_client.config import FatSecretConfig

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    AuthState.UNCONFIGURED: "Consumer credentials are not configured.",
    AuthState.CONFIGURED: "Not authenticated for profile access. Use start_auth to begin.",
    AuthState.PENDING_AUTHORIZATION: (
        "Authorization pending. Visit the authorization URL and call complete_auth "
        "with the verifier code."
    ),
    AuthState.AUTHORIZED: "Profile authentication is configured. All tools are available.",
}


class FatSecretAuth:
    """OAuth 1.0a authorization handler for one tenant.

    Implements the out-of-band (PIN) flow:
    1. Get request token, hand the authorization URL to the user
    2. User authorizes and receives a verifier (manual step)
    3. Exchange verifier for a permanent access token

    Only the most recently issued request token can be completed; a second
    `start_authorization()` silently replaces the first.
    """

    def __init__(
        self,
        config: FatSecretConfig,
        tenant: Tenant,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.tenant = tenant
        self._http_client = http_client

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    @property
    def state(self) -> AuthState:
        return self.tenant.state

    @property
    def is_authenticated(self) -> bool:
        """Check if we have a user access token."""
        return self.tenant.access_token is not None

    def configure(self, consumer_key: str, consumer_secret: str) -> None:
        """Set consumer credentials.

        An existing access token is kept. Persisted immediately when the
        tenant is backed by a store.
        """
        consumer_key = consumer_key.strip()
        consumer_secret = consumer_secret.strip()
        if not consumer_key:
            raise FatSecretValidationError("Consumer key must not be empty", field="consumer_key")
        if not consumer_secret:
            raise FatSecretValidationError(
                "Consumer secret must not be empty", field="consumer_secret"
            )

        self.tenant.consumer = ConsumerCredentials(
            consumer_key=consumer_key, consumer_secret=consumer_secret
        )
        # The cached bearer token was issued to the previous consumer
        self.tenant.bearer = None
        if self.tenant.store is not None:
            self.tenant.store.save(
                {"consumer_key": consumer_key, "consumer_secret": consumer_secret}
            )
        logger.info("Consumer credentials configured")

    async def start_authorization(self, *, timeout: float | None = None) -> RequestToken:
        """Step 1: Get a request token to start the OAuth flow.

        Returns a RequestToken with the authorization URL that the user
        must visit to obtain a verifier code.
        """
        credentials = self.tenant.consumer_credentials()
        url = self.config.request_token_url

        text = await self._fetch(
            url,
            credentials,
            {"oauth_callback": "oob"},  # Out-of-band: PIN based
            stage="request_token",
            timeout=timeout,
        )
        token, token_secret = self._parse_token_response(text, stage="request_token")

        request_token = RequestToken(
            token=token,
            token_secret=token_secret,
            authorization_url=f"{self.config.authorize_url}?{urlencode({'oauth_token': token})}",
        )
        # Replaces any earlier pending token
        self.tenant.pending = request_token
        logger.info("Authorization started, waiting for verifier")
        return request_token

    async def complete_authorization(
        self, verifier: str, *, timeout: float | None = None
    ) -> AccessToken:
        """Step 2: Exchange verifier code for an access token.

        Args:
            verifier: The verification code shown to the user after authorization

        Returns:
            AccessToken for profile API access

        The pending request token is kept when the exchange fails so the
        caller can retry with a corrected verifier.
        """
        pending = self.tenant.pending
        if pending is None:
            raise NoPendingAuthorizationError()

        verifier = (verifier or "").strip()
        if not verifier:
            raise FatSecretValidationError("Verifier must not be empty", field="verifier")

        text = await self._fetch(
            self.config.access_token_url,
            self.tenant.consumer_credentials(pending),
            {"oauth_verifier": verifier},
            stage="access_token",
            timeout=timeout,
        )
        token, token_secret = self._parse_token_response(text, stage="access_token")

        access_token = AccessToken(token=token, token_secret=token_secret)
        self.tenant.access_token = access_token
        # Only clear the slot if no newer start_authorization() replaced it meanwhile
        if self.tenant.pending is pending:
            self.tenant.pending = None

        if self.tenant.store is not None:
            self.tenant.store.save(
                {"access_token": token, "access_token_secret": token_secret}
            )
        logger.info("Authorization completed")
        return access_token

    def forget(self) -> None:
        """Drop the user access token and any pending authorization."""
        self.tenant.access_token = None
        self.tenant.pending = None
        if self.tenant.store is not None:
            self.tenant.store.save({"access_token": None, "access_token_secret": None})
        logger.info("Access token cleared")

    def status(self) -> AuthStatus:
        """Report the authorization state without any network call."""
        state = self.tenant.state
        store = self.tenant.store
        return AuthStatus(
            state=state,
            credentials_configured=self.tenant.consumer is not None,
            profile_authenticated=self.tenant.access_token is not None,
            pending_authorization=self.tenant.pending is not None,
            message=self._status_message(state),
            config_path=str(store.path) if store is not None else None,
            config_exists=store.exists() if store is not None else None,
        )

    def sign_request(
        self,
        method: str,
        url: str,
        params: Mapping[str, str] | None = None,
        placement: SignaturePlacement = SignaturePlacement.QUERY,
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Sign a protected API request with the user access token.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            url: Request URL without query string
            params: Request parameters (query or body)
            placement: Where the OAuth parameters go

        Returns:
            `(params, headers)` ready to send

        Raises:
            UnauthorizedError: No user access token; nothing is signed
        """
        signed = sign(method, url, self.tenant.user_credentials(), params)
        return signed.apply(placement)

    def _status_message(self, state: AuthState) -> str:
        if state is AuthState.UNCONFIGURED:
            if self.tenant.persistent:
                return _STATUS_MESSAGES[state] + " Use setup_credentials to store them."
            return (
                _STATUS_MESSAGES[state]
                + " The server operator must set the FATSECRET_CLIENT_ID and "
                "FATSECRET_CLIENT_SECRET environment variables."
            )
        return _STATUS_MESSAGES[state]

    async def _fetch(
        self,
        url: str,
        credentials: OAuth1Credentials,
        params: dict[str, str],
        *,
        stage: str,
        timeout: float | None,
    ) -> str:
        signed = sign("GET", url, credentials, params)
        query, headers = signed.apply(SignaturePlacement.QUERY)
        request_timeout = timeout if timeout is not None else self.config.timeout

        logger.debug("OAuth %s: GET %s", stage, url)
        if self._http_client is not None:
            response = await self._http_client.get(
                url, params=query, headers=headers, timeout=request_timeout
            )
        else:
            async with httpx.AsyncClient(timeout=request_timeout) as client:
                response = await client.get(url, params=query, headers=headers)

        if response.status_code != 200:
            raise UpstreamError(
                f"Failed to get {stage.replace('_', ' ')}: {response.status_code} {response.text}",
                stage=stage,
                status_code=response.status_code,
                response_body=response.text,
            )
        return response.text

    @staticmethod
    def _parse_token_response(text: str, *, stage: str) -> tuple[str, str]:
        data = parse_qs(text)
        token = data.get("oauth_token", [""])[0]
        token_secret = data.get("oauth_token_secret", [""])[0]
        if not token or not token_secret:
            raise UpstreamError(
                f"Invalid {stage.replace('_', ' ')} response",
                stage=stage,
                status_code=200,
                response_body=text,
            )
        return token, token_secret
