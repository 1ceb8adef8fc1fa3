"""OAuth 1.0a request signing (RFC 5849, HMAC-SHA1).

Everything here is pure: no I/O and no shared state. Nonce and timestamp can
be injected so a signature can be reproduced exactly.
"""

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


class SignaturePlacement(StrEnum):
    """Where the signed OAuth parameters travel."""

    QUERY = "query"  # every parameter, oauth_* included, in one query string
    HEADER = "header"  # oauth_* in the Authorization header, request params untouched


@dataclass(frozen=True, slots=True)
class OAuth1Credentials:
    """Credentials used to sign one request."""

    consumer_key: str
    consumer_secret: str
    token: str | None = None
    token_secret: str | None = None


@dataclass(frozen=True, slots=True)
class SignedRequest:
    """Result of a single signing pass.

    `oauth_params` holds every protocol parameter including `oauth_signature`;
    `params` holds the caller's non-protocol parameters exactly as given.
    """

    method: str
    url: str
    params: dict[str, str]
    oauth_params: dict[str, str]
    base_string: str
    signature: str

    def authorization_header(self) -> str:
        """Render the `Authorization: OAuth ...` header value."""
        auth_parts = [
            f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(self.oauth_params.items())
        ]
        return "OAuth " + ", ".join(auth_parts)

    def query_params(self) -> dict[str, str]:
        """Flat map of request and OAuth parameters for a single query string."""
        return {**self.params, **self.oauth_params}

    def apply(self, placement: SignaturePlacement) -> tuple[dict[str, str], dict[str, str]]:
        """Return `(params, headers)` for the given placement."""
        if placement is SignaturePlacement.QUERY:
            return self.query_params(), {}
        return dict(self.params), {"Authorization": self.authorization_header()}


def percent_encode(value: str) -> str:
    """Percent-encode per RFC 3986: only ALPHA, DIGIT and `-._~` pass through."""
    return quote(str(value), safe="~")


def normalize_parameters(params: Mapping[str, str]) -> str:
    """Encode, sort by encoded key then encoded value, and join with `&`."""
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params.items())
    return "&".join(f"{k}={v}" for k, v in encoded)


def signature_base_string(method: str, url: str, params: Mapping[str, str]) -> str:
    """Build the signature base string: METHOD&enc(url)&enc(normalized params)."""
    return "&".join(
        [
            method.upper(),
            percent_encode(url),
            percent_encode(normalize_parameters(params)),
        ]
    )


def signing_key(consumer_secret: str, token_secret: str | None = None) -> str:
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret or '')}"


def hmac_sha1(base_string: str, key: str) -> str:
    """Base64 HMAC-SHA1 of the base string."""
    digest = hmac.new(key.encode(), base_string.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def generate_nonce() -> str:
    return secrets.token_hex(16)


def generate_timestamp() -> str:
    return str(int(time.time()))


def sign(
    method: str,
    url: str,
    credentials: OAuth1Credentials,
    params: Mapping[str, str] | None = None,
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> SignedRequest:
    """Sign a request.

    Args:
        method: HTTP method, any case
        url: Request URL without a query string
        credentials: Consumer credentials, optionally with a token
        params: Parameters the request will carry. Keys starting with
            `oauth_` (e.g. `oauth_callback`, `oauth_verifier`) are treated
            as protocol parameters.
        nonce: Override the random nonce
        timestamp: Override the current Unix time

    Returns:
        SignedRequest that renders either as a header or as query parameters
    """
    oauth_params = {
        "oauth_consumer_key": credentials.consumer_key,
        "oauth_nonce": nonce or generate_nonce(),
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp or generate_timestamp(),
        "oauth_version": OAUTH_VERSION,
    }
    if credentials.token:
        oauth_params["oauth_token"] = credentials.token

    request_params: dict[str, str] = {}
    for key, value in (params or {}).items():
        if key.startswith("oauth_"):
            oauth_params[key] = str(value)
        else:
            request_params[key] = str(value)

    base_string = signature_base_string(method, url, {**request_params, **oauth_params})
    signature = hmac_sha1(
        base_string, signing_key(credentials.consumer_secret, credentials.token_secret)
    )
    oauth_params["oauth_signature"] = signature

    return SignedRequest(
        method=method.upper(),
        url=url,
        params=request_params,
        oauth_params=oauth_params,
        base_string=base_string,
        signature=signature,
    )
