"""Authorization code flow client.

AuthorizationCodeClient ties the pieces together:
1. Validate the request and build its parameter set (no I/O)
2. Resolve the authority's endpoints (cached per authority string)
3. Serialize the parameters onto the authorization endpoint

and, for redemption, POSTs the code + PKCE verifier to the token endpoint.
"""

import json
import logging
from dataclasses import dataclass

from .authority import Authority, AuthorityResolver, canonicalize_authority
from .configuration import ClientConfiguration, build_configuration
from .constants import S256_CODE_CHALLENGE_METHOD, ServerParamKeys
from .crypto import PkceCodes
from .errors import NetworkError, TokenRedemptionError
from .network import NetworkRequestOptions
from .parameters import generate_auth_code_params, generate_auth_code_url_params
from .requests import AuthorizationRequest, RedemptionRequest
from .tokens import TokenSet, token_cache_key
from .url import create_query_string, create_url
from .validator import validate_and_generate_scopes

logger = logging.getLogger(__name__)


@dataclass
class AuthCodeUrlResult:
    """An authorization URL plus the values needed to handle its response.

    Attributes:
        url: The authorization URL to open
        state: Full state value sent, to compare with the returned one
        correlation_id: client-request-id sent with the request
    """

    url: str
    state: str
    correlation_id: str


def _error_detail(body: object) -> str:
    """Extract only the standard OAuth error fields from an error body."""
    if not isinstance(body, dict):
        # Don't echo raw bodies - they might contain tokens or secrets
        return ""
    return f": {body.get('error', '')} - {body.get('error_description', '')}"


class AuthorizationCodeClient:
    """Client for the OAuth2/OIDC authorization code flow.

    Usage:
        client = AuthorizationCodeClient(ClientConfiguration(client_id="..."))
        pkce = await client.generate_pkce_codes()
        url = await client.get_auth_code_url(AuthorizationRequest(
            redirect_uri="http://localhost:8080/callback",
            code_challenge=pkce.challenge,
            code_challenge_method="S256",
        ))
        ...
        token = await client.acquire_token_by_code(RedemptionRequest(
            code=code, redirect_uri=..., code_verifier=pkce.verifier,
        ))
    """

    def __init__(self, configuration: ClientConfiguration):
        """Initialize the client.

        Raises:
            ConfigurationError: If the client id or default authority is invalid
        """
        self.config = build_configuration(configuration)
        self.crypto = self.config.crypto
        self.network = self.config.network
        self.cache = self.config.cache
        self.authority_resolver = AuthorityResolver(self.config.authority, self.network)

    async def get_auth_code_url(self, request: AuthorizationRequest) -> str:
        """Create the URL the user visits to sign in.

        The scopes openid, profile and offline_access are always requested.

        Raises:
            ConfigurationError: If the request is invalid (before any I/O)
            EndpointDiscoveryError: If the authority cannot be resolved
        """
        result = await self.prepare_auth_code_url(request)
        return result.url

    async def prepare_auth_code_url(self, request: AuthorizationRequest) -> AuthCodeUrlResult:
        """Like get_auth_code_url, also returning the state and correlation id."""
        params = generate_auth_code_url_params(request, self.config)
        authority = await self._set_authority(request.authority)

        if (
            request.code_challenge_method == S256_CODE_CHALLENGE_METHOD
            and not authority.metadata.supports_pkce()
        ):
            logger.warning(
                f"Authority {authority.canonical_authority} does not advertise S256 PKCE support"
            )

        return AuthCodeUrlResult(
            url=create_url(params, authority),
            state=params[ServerParamKeys.STATE],
            correlation_id=params[ServerParamKeys.CLIENT_REQUEST_ID],
        )

    async def acquire_token_by_code(self, request: RedemptionRequest) -> TokenSet:
        """Redeem an authorization code for tokens.

        The resulting TokenSet is also written to the configured cache.

        Raises:
            ConfigurationError: If the request is invalid (before any I/O)
            EndpointDiscoveryError: If the authority cannot be resolved
            TokenRedemptionError: If the token endpoint rejects the request
        """
        params = generate_auth_code_params(request, self.config)
        authority = await self._set_authority(request.authority)

        options = NetworkRequestOptions(
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                ServerParamKeys.CLIENT_REQUEST_ID: params[ServerParamKeys.CLIENT_REQUEST_ID],
            },
            body=create_query_string(params),
        )

        try:
            response = await self.network.post(authority.token_endpoint, options)
        except NetworkError as e:
            raise TokenRedemptionError(f"Network error during token exchange: {e}") from e

        if response.status != 200:
            raise TokenRedemptionError(
                f"Token exchange failed (HTTP {response.status}){_error_detail(response.body)}"
            )

        if not isinstance(response.body, dict):
            raise TokenRedemptionError("Token response was not a JSON object")

        try:
            token = TokenSet.from_token_response(
                response.body,
                authority=authority.canonical_authority,
                client_id=self.config.client_id,
                requested_scope=params[ServerParamKeys.SCOPE],
            )
        except (KeyError, ValueError) as e:
            raise TokenRedemptionError(f"Token response is missing or has invalid field: {e}") from e

        # Keyed by the requested scopes so get_cached_token can find it again
        key = token_cache_key(
            self.config.client_id,
            authority.canonical_authority,
            params[ServerParamKeys.SCOPE],
        )
        self.cache.set(key, json.dumps(token.to_dict()))
        logger.debug(f"Cached tokens for {authority.canonical_authority}")

        return token

    def get_cached_token(self, scopes: list[str], authority: str | None = None) -> TokenSet | None:
        """Look up tokens previously stored by acquire_token_by_code.

        Scopes are canonicalized the same way as for the token request.
        """
        canonical = (
            canonicalize_authority(authority) if authority
            else self.authority_resolver.default_authority
        )
        scope = " ".join(validate_and_generate_scopes(scopes, self.config.client_id))

        raw = self.cache.get(token_cache_key(self.config.client_id, canonical, scope))
        if raw is None:
            return None
        return TokenSet.from_dict(json.loads(raw))

    async def generate_pkce_codes(self) -> PkceCodes:
        """Generate a PKCE pair. Keep the verifier for acquire_token_by_code."""
        return await self.crypto.generate_pkce_codes()

    async def _set_authority(self, authority: str | None) -> Authority:
        """Resolve the request authority, or the configured default."""
        return await self.authority_resolver.resolve(authority)
