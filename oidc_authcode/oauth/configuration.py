"""Application configuration threaded through the client."""

from dataclasses import dataclass, field

from .cache import CacheStorage, InMemoryCache
from .constants import DEFAULT_AUTHORITY
from .crypto import CryptoOps, CryptoProvider
from .errors import ConfigurationError
from .network import HttpClient, NetworkModule


@dataclass
class ClientConfiguration:
    """Configuration for a public client application.

    Attributes:
        client_id: Application (client) id registered with the provider
        authority: Authority used when a request doesn't override it
        redirect_uri: Default redirect URI (used by the CLI)
        crypto: Crypto provider
        network: Network module
        cache: Cache storage
    """

    client_id: str
    authority: str = DEFAULT_AUTHORITY
    redirect_uri: str | None = None
    crypto: CryptoProvider = field(default_factory=CryptoOps)
    network: NetworkModule = field(default_factory=HttpClient)
    cache: CacheStorage = field(default_factory=InMemoryCache)


def build_configuration(configuration: ClientConfiguration) -> ClientConfiguration:
    """Validate a configuration and fill in anything left empty.

    Raises:
        ConfigurationError: If the client id is missing
    """
    if not configuration.client_id:
        raise ConfigurationError("client_id", "a client id is required")

    if not configuration.authority:
        configuration.authority = DEFAULT_AUTHORITY

    return configuration
