"""Serializes parameter sets into query strings and URLs."""

from collections.abc import Mapping
from urllib.parse import quote

from .authority import Authority

# Characters encodeURIComponent leaves alone besides alphanumerics
_SAFE_CHARS = "-_.!~*'()"


def encode_component(value: str) -> str:
    """Percent-encode a single query value (spaces become %20)."""
    return quote(value, safe=_SAFE_CHARS)


def create_query_string(params: Mapping[str, str]) -> str:
    """Serialize params as key=value pairs in insertion order.

    Empty values are dropped entirely.
    """
    return "&".join(
        f"{encode_component(key)}={encode_component(value)}"
        for key, value in params.items()
        if value
    )


def create_url(params: Mapping[str, str], authority: Authority) -> str:
    """Append the serialized params to the authority's authorization endpoint."""
    endpoint = authority.authorization_endpoint
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}{create_query_string(params)}"
