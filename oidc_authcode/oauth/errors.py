"""Error types raised by the authorization code engine.

Validation problems are always ConfigurationError and are raised before
any network I/O. Problems talking to the identity provider surface as
EndpointDiscoveryError (metadata) or TokenRedemptionError (token endpoint).
"""


class AuthCodeError(Exception):
    """Base class for all oidc_authcode errors."""

    pass


class ConfigurationError(AuthCodeError):
    """A caller-supplied value violates a static request invariant.

    Attributes:
        field: Name of the offending field (e.g. "redirect_uri")
    """

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class EndpointDiscoveryError(AuthCodeError):
    """Authority metadata could not be fetched or parsed.

    Fatal for the current call. The underlying failure is chained as
    __cause__ and its text is embedded in the message.

    Cancellation is not converted: a cancelled discovery leaves the authority
    FAILED and asyncio.CancelledError reaches the caller unchanged.
    """

    def __init__(self, authority: str, detail: str):
        super().__init__(
            f"Endpoint resolution failed for {authority}. Detail: {detail}"
        )
        self.authority = authority
        self.detail = detail


class TokenRedemptionError(AuthCodeError):
    """Error while redeeming an authorization code at the token endpoint."""

    pass


class StateMismatchError(AuthCodeError):
    """The state returned by the server does not match the one we sent."""

    pass


class NetworkError(AuthCodeError):
    """Transport-level failure in the HTTP network module."""

    pass


class CacheStorageError(AuthCodeError):
    """Error in cache storage operations."""

    pass


class CacheDecryptionError(CacheStorageError):
    """Failed to decrypt the cache file.

    The encryption key has changed (keyring cleared, different machine) and
    the stored entries cannot be read. Callers should clear() the cache.
    """

    pass
