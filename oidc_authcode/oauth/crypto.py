"""Crypto provider: random identifiers, base64url and PKCE per RFC 7636.

The engine only depends on the CryptoProvider protocol. CryptoOps is the
default implementation; tests substitute deterministic stubs.
"""

import base64
import hashlib
import secrets
import uuid
from dataclasses import dataclass
from typing import Protocol


# PKCE code verifier length constraints per RFC 7636
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128
DEFAULT_VERIFIER_LENGTH = 64

# Allowed characters for code verifier (unreserved URI characters)
VERIFIER_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~"


@dataclass(frozen=True)
class PkceCodes:
    """PKCE code verifier and challenge pair.

    The verifier is kept by the caller between the interactive step and the
    redemption step. The challenge is sent in the authorization request.
    """

    verifier: str
    challenge: str


class CryptoProvider(Protocol):
    """Platform crypto capability used by the engine."""

    def new_guid(self) -> str: ...

    def base64_url_encode(self, data: bytes) -> str: ...

    def base64_url_decode(self, data: str) -> bytes: ...

    async def generate_pkce_codes(self) -> PkceCodes: ...


def base64_url_encode(data: bytes) -> str:
    """Base64URL-encode bytes without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def base64_url_decode(data: str) -> bytes:
    """Decode Base64URL text, with or without padding.

    Raises:
        ValueError: If the input is not valid base64url
    """
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def generate_code_verifier(length: int = DEFAULT_VERIFIER_LENGTH) -> str:
    """Generate a cryptographically random code verifier.

    Per RFC 7636 Section 4.1, the code verifier must be:
    - Between 43 and 128 characters
    - Use only unreserved URI characters: [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"

    Args:
        length: Length of the verifier (default 64, must be 43-128)

    Returns:
        Cryptographically random code verifier string

    Raises:
        ValueError: If length is outside allowed range
    """
    if length < MIN_VERIFIER_LENGTH or length > MAX_VERIFIER_LENGTH:
        raise ValueError(
            f"Code verifier length must be between {MIN_VERIFIER_LENGTH} "
            f"and {MAX_VERIFIER_LENGTH}, got {length}"
        )

    return "".join(secrets.choice(VERIFIER_CHARS) for _ in range(length))


def generate_code_challenge(verifier: str) -> str:
    """Generate S256 code challenge from verifier.

    code_challenge = BASE64URL(SHA256(code_verifier))
    """
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64_url_encode(digest)


class CryptoOps:
    """Default crypto provider backed by the standard library CSPRNG."""

    def __init__(self, verifier_length: int = DEFAULT_VERIFIER_LENGTH):
        self.verifier_length = verifier_length

    def new_guid(self) -> str:
        """Create a new random (version 4) GUID, used for state and correlation ids."""
        return str(uuid.uuid4())

    def base64_url_encode(self, data: bytes) -> str:
        return base64_url_encode(data)

    def base64_url_decode(self, data: str) -> bytes:
        return base64_url_decode(data)

    async def generate_pkce_codes(self) -> PkceCodes:
        """Generate a fresh PKCE verifier/challenge pair (S256)."""
        verifier = generate_code_verifier(self.verifier_length)
        return PkceCodes(verifier=verifier, challenge=generate_code_challenge(verifier))
