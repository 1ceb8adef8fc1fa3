"""Shared fixtures: configs, tenants, and a fake FatSecret upstream."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import urlencode

import httpx
import pytest

from fatsecret_client.auth.signing import hmac_sha1, signature_base_string, signing_key
from fatsecret_client.auth.tenant import Tenant
from fatsecret_client.config import FatSecretConfig
from fatsecret_client.models.auth import AccessToken, ConsumerCredentials


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path_factory) -> None:
    """Keep tests away from real credentials and the real config dir."""
    for var in (
        "FATSECRET_CLIENT_ID",
        "FATSECRET_CLIENT_SECRET",
        "FATSECRET_CONSUMER_KEY",
        "FATSECRET_CONSUMER_SECRET",
        "FATSECRET_SCOPE",
        "FATSECRET_TOKEN_MARGIN",
        "FATSECRET_CONFIG_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg-config")))


@pytest.fixture
def config() -> FatSecretConfig:
    """Create a test configuration."""
    return FatSecretConfig(consumer_key="test_key", consumer_secret="test_secret")


@pytest.fixture
def consumer() -> ConsumerCredentials:
    return ConsumerCredentials(consumer_key="test_key", consumer_secret="test_secret")


@pytest.fixture
def tenant(consumer: ConsumerCredentials) -> Tenant:
    """Configured, not yet authorized, ephemeral tenant."""
    return Tenant(consumer=consumer)


@pytest.fixture
def authorized_tenant(consumer: ConsumerCredentials) -> Tenant:
    return Tenant(
        consumer=consumer,
        access_token=AccessToken(token="user_token", token_secret="user_secret"),
    )


def signature_is_valid(request: httpx.Request, consumer_secret: str, token_secret: str) -> bool:
    """Server-side check of a query-string signed request."""
    params = dict(request.url.params)
    signature = params.pop("oauth_signature", None)
    if signature is None:
        return False
    url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
    base_string = signature_base_string(request.method, url, params)
    return hmac_sha1(base_string, signing_key(consumer_secret, token_secret)) == signature


@dataclass
class FakeFatSecret:
    """In-memory FatSecret OAuth and REST endpoints.

    Request tokens are issued in order from `request_tokens`; each one has
    its own verifier. The access-token endpoint only accepts the verifier
    belonging to the request token it was signed with.
    """

    consumer_secret: str = "test_secret"
    request_tokens: list[str] = field(default_factory=lambda: ["reqA", "reqB", "reqC"])
    expires_in: int = 86400
    requests: list[httpx.Request] = field(default_factory=list)
    grant_status: int = 200
    api_handler: Callable[[httpx.Request], httpx.Response] | None = None
    _issued: int = 0

    def verifier_for(self, token: str) -> str:
        return f"pin-{token}"

    def calls_to(self, path_suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.endswith("/oauth/request_token"):
            if not signature_is_valid(request, self.consumer_secret, ""):
                return httpx.Response(401, text="oauth_problem=signature_invalid")
            if request.url.params.get("oauth_callback") != "oob":
                return httpx.Response(400, text="oauth_problem=parameter_absent")
            token = self.request_tokens[self._issued]
            self._issued += 1
            body = urlencode(
                {
                    "oauth_token": token,
                    "oauth_token_secret": f"{token}-secret",
                    "oauth_callback_confirmed": "true",
                }
            )
            return httpx.Response(200, text=body)

        if path.endswith("/oauth/access_token"):
            token = request.url.params.get("oauth_token", "")
            if not signature_is_valid(request, self.consumer_secret, f"{token}-secret"):
                return httpx.Response(401, text="oauth_problem=signature_invalid")
            if request.url.params.get("oauth_verifier") != self.verifier_for(token):
                return httpx.Response(401, text="oauth_problem=permission_denied")
            body = urlencode({"oauth_token": f"access-{token}", "oauth_token_secret": "access-secret"})
            return httpx.Response(200, text=body)

        if path.endswith("/connect/token"):
            if self.grant_status != 200:
                return httpx.Response(self.grant_status, text='{"error":"invalid_client"}')
            n = len(self.calls_to("/connect/token"))
            return httpx.Response(
                200,
                json={
                    "access_token": f"bearer-{n}",
                    "expires_in": self.expires_in,
                    "token_type": "Bearer",
                },
            )

        if self.api_handler is not None:
            return self.api_handler(request)
        return httpx.Response(200, json={"ok": True, "path": path})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake() -> FakeFatSecret:
    return FakeFatSecret()


@pytest.fixture
async def http_client(fake: FakeFatSecret):
    async with fake.client() as client:
        yield client
