"""OAuth authentication for the FatSecret API."""

from fatsecret_client.auth.oauth import FatSecretAuth
from fatsecret_client.auth.oauth2 import OAuth2TokenCache
from fatsecret_client.auth.signing import OAuth1Credentials, SignaturePlacement, SignedRequest, sign
from fatsecret_client.auth.tenant import Tenant
from fatsecret_client.auth.tokens import CredentialStore

__all__ = [
    "CredentialStore",
    "FatSecretAuth",
    "OAuth1Credentials",
    "OAuth2TokenCache",
    "SignaturePlacement",
    "SignedRequest",
    "Tenant",
    "sign",
]
