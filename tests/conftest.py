"""Shared fixtures and stub collaborators for oidc-authcode tests."""

import os
from collections.abc import Generator
from typing import Any

import pytest

from oidc_authcode.oauth.cache import InMemoryCache
from oidc_authcode.oauth.client import AuthorizationCodeClient
from oidc_authcode.oauth.configuration import ClientConfiguration
from oidc_authcode.oauth.crypto import PkceCodes
from oidc_authcode.oauth.network import NetworkRequestOptions, NetworkResponse


# ============================================================================
# Sample Data
# ============================================================================

CLIENT_ID = "0813e1d1-ad72-46a9-8665-399bba48c201"
RANDOM_TEST_GUID = "11553a9b-7116-48b1-9d48-f6d4a8ff8371"
REDIRECT_URI = "https://localhost:8081/index.html"
TEST_VERIFIER = "JZGUNcxDngDrJMWQGgjEdjnzbRrWLzGLAOmNxXOqOEAzkWTgmZvFJHLgmLVoRLoW"
TEST_CHALLENGE = "kcgsc5aXJaRSzn8MRsMYpmCGrpZtR3vt3YuJCvOCW7U"

DEFAULT_DISCOVERY_URL = "https://login.microsoftonline.com/common/v2.0/.well-known/openid-configuration"
ALTERNATE_AUTHORITY = "https://login.windows.net/common/"
ALTERNATE_DISCOVERY_URL = "https://login.windows.net/common/v2.0/.well-known/openid-configuration"

DEFAULT_OPENID_CONFIG_RESPONSE: dict[str, Any] = {
    "token_endpoint": "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token",
    "authorization_endpoint": "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize",
    "end_session_endpoint": "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/logout",
    "issuer": "https://login.microsoftonline.com/{tenant}/v2.0",
    "scopes_supported": ["openid", "profile", "email", "offline_access"],
}

ALTERNATE_OPENID_CONFIG_RESPONSE: dict[str, Any] = {
    "token_endpoint": "https://login.windows.net/{tenant}/oauth2/v2.0/token",
    "authorization_endpoint": "https://login.windows.net/{tenant}/oauth2/v2.0/authorize",
    "issuer": "https://login.windows.net/{tenant}/v2.0",
}


# ============================================================================
# Stub Collaborators
# ============================================================================


class StubCrypto:
    """Deterministic crypto provider."""

    def __init__(self) -> None:
        self.guid_calls = 0

    def new_guid(self) -> str:
        self.guid_calls += 1
        return RANDOM_TEST_GUID

    def base64_url_encode(self, data: bytes) -> str:
        return data.decode("utf-8")

    def base64_url_decode(self, data: str) -> bytes:
        return data.encode("utf-8")

    async def generate_pkce_codes(self) -> PkceCodes:
        return PkceCodes(verifier=TEST_VERIFIER, challenge=TEST_CHALLENGE)


class StubNetwork:
    """Network module answering from a URL -> response table.

    A table value may be a NetworkResponse, a JSON dict (served with 200)
    or an exception instance to raise. Unknown URLs answer 404. Every call
    is recorded.
    """

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.get_calls: list[str] = []
        self.post_calls: list[tuple[str, NetworkRequestOptions | None]] = []

    @property
    def call_count(self) -> int:
        return len(self.get_calls) + len(self.post_calls)

    def _answer(self, url: str) -> NetworkResponse:
        value = self.routes.get(url)
        if value is None:
            return NetworkResponse(status=404, body={"error": "not_found"})
        if isinstance(value, BaseException):
            raise value
        if isinstance(value, NetworkResponse):
            return value
        return NetworkResponse(status=200, body=value)

    async def get(self, url: str, options: NetworkRequestOptions | None = None) -> NetworkResponse:
        self.get_calls.append(url)
        return self._answer(url)

    async def post(self, url: str, options: NetworkRequestOptions | None = None) -> NetworkResponse:
        self.post_calls.append((url, options))
        return self._answer(url)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def stub_crypto() -> StubCrypto:
    return StubCrypto()


@pytest.fixture
def stub_network() -> StubNetwork:
    """Network that serves the default and alternate discovery documents."""
    return StubNetwork(
        {
            DEFAULT_DISCOVERY_URL: DEFAULT_OPENID_CONFIG_RESPONSE,
            ALTERNATE_DISCOVERY_URL: ALTERNATE_OPENID_CONFIG_RESPONSE,
        }
    )


@pytest.fixture
def client_config(stub_crypto: StubCrypto, stub_network: StubNetwork) -> ClientConfiguration:
    return ClientConfiguration(
        client_id=CLIENT_ID,
        crypto=stub_crypto,
        network=stub_network,
        cache=InMemoryCache(),
    )


@pytest.fixture
def client(client_config: ClientConfiguration) -> AuthorizationCodeClient:
    return AuthorizationCodeClient(client_config)


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Temporarily clear AUTHCODE_* environment variables."""
    old_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("AUTHCODE_"):
            del os.environ[key]
    yield
    os.environ.clear()
    os.environ.update(old_env)
