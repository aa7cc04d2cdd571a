"""oidc-authcode - Client-side engine for the OAuth2/OIDC authorization code flow."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("oidc-authcode")
except PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback for development

__all__ = [
    "__version__",
    "AuthorizationCodeClient",
    "AuthorizationRequest",
    "RedemptionRequest",
    "ClientConfiguration",
    "load_config",
]

# Lazy imports to avoid circular dependencies
def __getattr__(name: str) -> object:
    """Lazy import module components."""
    if name in ("AuthorizationCodeClient", "AuthorizationRequest", "RedemptionRequest", "ClientConfiguration"):
        from . import oauth
        return getattr(oauth, name)
    elif name == "load_config":
        from .config import load_config
        return load_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
