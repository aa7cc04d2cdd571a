"""Authority resolution via OpenID Connect discovery.

An Authority starts UNRESOLVED, fetches the provider's metadata document
and ends RESOLVED or FAILED. Both end states are terminal; retrying means
constructing a new Authority. AuthorityResolver owns one Authority per
canonical authority string and never re-fetches a RESOLVED one.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from .constants import DISCOVERY_PATHS, TENANT_PLACEHOLDER
from .errors import ConfigurationError, EndpointDiscoveryError, NetworkError
from .network import NetworkModule

logger = logging.getLogger(__name__)


def _http_status_hint(status_code: int) -> str:
    """Get a user-friendly hint for common HTTP status codes."""
    hints = {
        400: "Bad request - the tenant or authority path may be wrong",
        404: "Metadata document not found - the provider may not support discovery at this URL",
        500: "Server error - the identity provider may be experiencing issues",
        502: "Bad gateway - there may be a proxy or network issue",
        503: "Service unavailable - the server may be temporarily down",
    }
    return hints.get(status_code, "")


class AuthorityState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    FAILED = "failed"


class MetadataError(Exception):
    """A metadata document is unusable (missing field, non-HTTPS endpoint)."""

    pass


def _require_https(url: Any, context: str) -> None:
    """Reject endpoints that don't use HTTPS.

    Raises:
        MetadataError: If the URL doesn't use HTTPS
    """
    if not isinstance(url, str):
        raise MetadataError(f"{context} must be a URL string, got: {url!r}")
    if urlparse(url).scheme != "https":
        raise MetadataError(f"{context} must use HTTPS for security, got: {url}")


def canonicalize_authority(authority: str) -> str:
    """Validate an authority URL and return it with a trailing slash.

    An authority is an https URL whose first path segment names the tenant,
    e.g. https://login.microsoftonline.com/common/.

    Raises:
        ConfigurationError: If the authority is empty, not https, or has no tenant
    """
    if not authority:
        raise ConfigurationError("authority", "an authority URL is required")

    parsed = urlparse(authority)
    if parsed.scheme != "https" or not parsed.netloc:
        raise ConfigurationError(
            "authority", f"authority must be an https URL, got: {authority}"
        )
    if parsed.query or parsed.fragment:
        raise ConfigurationError(
            "authority", f"authority may not carry a query or fragment: {authority}"
        )

    path = parsed.path.strip("/")
    if not path:
        raise ConfigurationError(
            "authority", f"authority must include a tenant path segment: {authority}"
        )

    return f"https://{parsed.netloc.lower()}/{path}/"


@dataclass
class AuthorityMetadata:
    """Endpoints read from the provider's openid-configuration document.

    Endpoint values may be templates containing {tenant}.
    """

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    end_session_endpoint: str | None = None
    scopes_supported: list[str] | None = None
    code_challenge_methods_supported: list[str] = field(default_factory=list)

    def supports_pkce(self) -> bool:
        """S256 support, assumed when the document doesn't say."""
        if not self.code_challenge_methods_supported:
            return True
        return "S256" in self.code_challenge_methods_supported

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthorityMetadata":
        """Create from the JSON metadata document.

        Raises:
            MetadataError: If a required endpoint is missing, not a string or not HTTPS
        """
        try:
            auth_endpoint = data["authorization_endpoint"]
            token_endpoint = data["token_endpoint"]
        except KeyError as e:
            raise MetadataError(f"Metadata missing required field: {e}") from e

        _require_https(auth_endpoint, "Authorization endpoint")
        _require_https(token_endpoint, "Token endpoint")

        end_session_endpoint = data.get("end_session_endpoint")
        if end_session_endpoint:
            _require_https(end_session_endpoint, "End session endpoint")

        issuer = data.get("issuer", "")
        if not isinstance(issuer, str):
            raise MetadataError(f"Issuer must be a string, got: {issuer!r}")

        return cls(
            issuer=issuer,
            authorization_endpoint=auth_endpoint,
            token_endpoint=token_endpoint,
            end_session_endpoint=end_session_endpoint,
            scopes_supported=data.get("scopes_supported"),
            code_challenge_methods_supported=data.get("code_challenge_methods_supported", []),
        )


class Authority:
    """An identity provider authority and its discovery state."""

    def __init__(self, authority: str, network: NetworkModule):
        """Create an unresolved authority.

        Raises:
            ConfigurationError: If the authority URL is malformed
        """
        self.canonical_authority = canonicalize_authority(authority)
        self.network = network
        self.state = AuthorityState.UNRESOLVED
        self._metadata: AuthorityMetadata | None = None

    @property
    def tenant(self) -> str:
        return urlparse(self.canonical_authority).path.strip("/").split("/")[0]

    @property
    def host(self) -> str:
        return urlparse(self.canonical_authority).netloc

    @property
    def discovery_endpoints(self) -> list[str]:
        return [f"{self.canonical_authority}{path}" for path in DISCOVERY_PATHS]

    def is_resolved(self) -> bool:
        return self.state is AuthorityState.RESOLVED

    @property
    def metadata(self) -> AuthorityMetadata:
        if self._metadata is None or not self.is_resolved():
            raise RuntimeError(f"Authority {self.canonical_authority} is not resolved")
        return self._metadata

    def _fill_tenant(self, template: str) -> str:
        return template.replace(TENANT_PLACEHOLDER, self.tenant)

    @property
    def issuer(self) -> str:
        return self._fill_tenant(self.metadata.issuer)

    @property
    def authorization_endpoint(self) -> str:
        return self._fill_tenant(self.metadata.authorization_endpoint)

    @property
    def token_endpoint(self) -> str:
        return self._fill_tenant(self.metadata.token_endpoint)

    @property
    def end_session_endpoint(self) -> str | None:
        if self.metadata.end_session_endpoint is None:
            return None
        return self._fill_tenant(self.metadata.end_session_endpoint)

    async def resolve_endpoints(self) -> None:
        """Fetch the metadata document and move to RESOLVED.

        Any failure, including cancellation, leaves the authority FAILED.

        Raises:
            MetadataError: If no candidate document could be used
            RuntimeError: If the authority already left UNRESOLVED
        """
        if self.state is not AuthorityState.UNRESOLVED:
            raise RuntimeError(
                f"Authority {self.canonical_authority} is {self.state.value}; "
                f"create a new instance to retry"
            )

        try:
            self._metadata = await self._discover()
            self.state = AuthorityState.RESOLVED
        finally:
            if self.state is AuthorityState.UNRESOLVED:
                self.state = AuthorityState.FAILED

    async def _discover(self) -> AuthorityMetadata:
        """Try each candidate metadata document in turn."""
        errors: list[tuple[str, str]] = []  # (endpoint, error_message)

        for endpoint in self.discovery_endpoints:
            logger.debug(f"Trying authority metadata endpoint: {endpoint}")
            try:
                response = await self.network.get(endpoint)
            except NetworkError as e:
                errors.append((endpoint, str(e)))
                continue

            if response.status != 200:
                hint = _http_status_hint(response.status)
                error_msg = f"HTTP {response.status}"
                if hint:
                    error_msg += f" ({hint})"
                errors.append((endpoint, error_msg))
                continue

            if not isinstance(response.body, dict):
                errors.append((endpoint, "Response was not a JSON object"))
                continue

            try:
                metadata = AuthorityMetadata.from_dict(response.body)
            except MetadataError as e:
                errors.append((endpoint, str(e)))
                continue

            logger.debug(f"Resolved {self.canonical_authority} via {endpoint}")
            return metadata

        error_details = "\n".join(f"  - {ep}: {err}" for ep, err in errors)
        raise MetadataError(
            f"Failed to fetch metadata for {self.canonical_authority}.\n"
            f"Tried the following endpoints:\n{error_details}"
        )


class AuthorityResolver:
    """Resolves authority strings to RESOLVED Authority instances.

    The default authority is used when a call doesn't name one. Resolved
    instances are cached per canonical authority string for the lifetime of
    the resolver. Concurrent first-time resolutions of the same authority
    are not coalesced and may each hit the network.
    """

    def __init__(self, default_authority: str, network: NetworkModule):
        self.default_authority = canonicalize_authority(default_authority)
        self.network = network
        self._authorities: dict[str, Authority] = {}

    async def resolve(self, authority_input: str | None = None) -> Authority:
        """Return a RESOLVED Authority for the input (or the default).

        A cancelled discovery marks the authority FAILED, so the next call
        starts a fresh one; the CancelledError itself propagates.

        Raises:
            ConfigurationError: If the authority string is malformed
            EndpointDiscoveryError: If discovery fails
        """
        key = canonicalize_authority(authority_input) if authority_input else self.default_authority

        authority = self._authorities.get(key)
        if authority is not None and authority.is_resolved():
            logger.debug(f"Using cached endpoints for {key}")
            return authority

        # Unresolved or failed instances are replaced, never reused
        authority = Authority(key, self.network)
        self._authorities[key] = authority

        try:
            await authority.resolve_endpoints()
        except Exception as e:
            raise EndpointDiscoveryError(key, str(e)) from e

        return authority
