"""OAuth2/OIDC authorization code flow engine.

This package builds authorization URLs and code-redemption requests for
the authorization code flow with PKCE, resolving the identity provider's
endpoints through OpenID Connect discovery.

Main Components:
    AuthorizationCodeClient: Builds URLs and redeems codes
    AuthorityResolver: Endpoint discovery, cached per authority
    CryptoProvider / NetworkModule / CacheStorage: Pluggable capabilities

Quick Start:
    from oidc_authcode.oauth import (
        AuthorizationCodeClient, AuthorizationRequest, ClientConfiguration,
    )

    client = AuthorizationCodeClient(ClientConfiguration(client_id="my-app"))
    pkce = await client.generate_pkce_codes()
    url = await client.get_auth_code_url(AuthorizationRequest(
        redirect_uri="http://localhost:8080/callback",
        code_challenge=pkce.challenge,
        code_challenge_method="S256",
    ))
"""

from .authority import Authority, AuthorityMetadata, AuthorityResolver, AuthorityState
from .cache import CacheStorage, EncryptedFileCache, InMemoryCache
from .client import AuthCodeUrlResult, AuthorizationCodeClient
from .configuration import ClientConfiguration, build_configuration
from .constants import DEFAULT_AUTHORITY, DEFAULT_SCOPES, RESOURCE_DELIM, Prompt
from .crypto import CryptoOps, CryptoProvider, PkceCodes
from .errors import (
    AuthCodeError,
    CacheDecryptionError,
    CacheStorageError,
    ConfigurationError,
    EndpointDiscoveryError,
    NetworkError,
    StateMismatchError,
    TokenRedemptionError,
)
from .network import HttpClient, NetworkModule, NetworkRequestOptions, NetworkResponse
from .parameters import ParameterSet, generate_auth_code_params, generate_auth_code_url_params
from .requests import AuthorizationRequest, RedemptionRequest
from .state import (
    get_library_state,
    get_user_request_state,
    set_request_state,
    validate_server_state,
)
from .tokens import TokenSet
from .url import create_query_string, create_url

__all__ = [
    # Client (main entry point)
    "AuthorizationCodeClient",
    "AuthCodeUrlResult",
    "ClientConfiguration",
    "build_configuration",
    # Requests
    "AuthorizationRequest",
    "RedemptionRequest",
    "Prompt",
    # Authority
    "Authority",
    "AuthorityMetadata",
    "AuthorityResolver",
    "AuthorityState",
    "DEFAULT_AUTHORITY",
    # Parameters and URLs
    "ParameterSet",
    "generate_auth_code_url_params",
    "generate_auth_code_params",
    "create_url",
    "create_query_string",
    "DEFAULT_SCOPES",
    # State
    "set_request_state",
    "get_user_request_state",
    "get_library_state",
    "validate_server_state",
    "RESOURCE_DELIM",
    # Capabilities
    "CryptoProvider",
    "CryptoOps",
    "PkceCodes",
    "NetworkModule",
    "HttpClient",
    "NetworkRequestOptions",
    "NetworkResponse",
    "CacheStorage",
    "InMemoryCache",
    "EncryptedFileCache",
    # Tokens
    "TokenSet",
    # Errors
    "AuthCodeError",
    "ConfigurationError",
    "EndpointDiscoveryError",
    "TokenRedemptionError",
    "StateMismatchError",
    "NetworkError",
    "CacheStorageError",
    "CacheDecryptionError",
]
