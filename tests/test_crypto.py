"""Tests for the crypto provider and PKCE helpers."""

import base64
import hashlib
import re
import uuid

import pytest

from oidc_authcode.oauth.crypto import (
    MAX_VERIFIER_LENGTH,
    MIN_VERIFIER_LENGTH,
    CryptoOps,
    PkceCodes,
    base64_url_decode,
    base64_url_encode,
    generate_code_challenge,
    generate_code_verifier,
)


class TestBase64Url:
    """Tests for base64url encoding without padding."""

    def test_encode_strips_padding(self):
        """Test that padding characters are removed."""
        assert base64_url_encode(b"a") == "YQ"
        assert "=" not in base64_url_encode(b"ab")

    def test_encode_uses_url_safe_alphabet(self):
        """Test that + and / are replaced with - and _."""
        encoded = base64_url_encode(bytes([0xFB, 0xFF, 0xBF]))
        assert encoded == "-_-_"

    def test_decode_accepts_unpadded_input(self):
        """Test decoding text whose padding was stripped."""
        assert base64_url_decode("YQ") == b"a"
        assert base64_url_decode("YWI") == b"ab"

    def test_decode_accepts_padded_input(self):
        """Test decoding text that still carries padding."""
        assert base64_url_decode("YQ==") == b"a"


class TestGenerateCodeVerifier:
    """Tests for code verifier generation."""

    def test_default_length(self):
        """Test default verifier length is 64."""
        assert len(generate_code_verifier()) == 64

    def test_allowed_characters_only(self):
        """Test verifier only uses unreserved URI characters."""
        verifier = generate_code_verifier(128)
        assert re.fullmatch(r"[A-Za-z0-9\-._~]+", verifier)

    def test_bounds_are_accepted(self):
        """Test minimum and maximum lengths are valid."""
        assert len(generate_code_verifier(MIN_VERIFIER_LENGTH)) == MIN_VERIFIER_LENGTH
        assert len(generate_code_verifier(MAX_VERIFIER_LENGTH)) == MAX_VERIFIER_LENGTH

    def test_too_short_raises(self):
        """Test that a verifier below 43 characters is rejected."""
        with pytest.raises(ValueError, match="must be between"):
            generate_code_verifier(42)

    def test_too_long_raises(self):
        """Test that a verifier above 128 characters is rejected."""
        with pytest.raises(ValueError, match="must be between"):
            generate_code_verifier(129)

    def test_verifiers_are_unique(self):
        """Test that consecutive verifiers differ."""
        assert len({generate_code_verifier() for _ in range(20)}) == 20


class TestGenerateCodeChallenge:
    """Tests for S256 challenge derivation."""

    def test_rfc7636_appendix_b_vector(self):
        """Test the example from RFC 7636 Appendix B."""
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert generate_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_matches_manual_computation(self):
        """Test challenge equals base64url(sha256(verifier)) without padding."""
        verifier = generate_code_verifier()
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        expected = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
        assert generate_code_challenge(verifier) == expected

    def test_challenge_length(self):
        """Test that a SHA-256 challenge is always 43 characters."""
        assert len(generate_code_challenge(generate_code_verifier())) == 43


class TestCryptoOps:
    """Tests for the default crypto provider."""

    def test_new_guid_is_uuid4(self):
        """Test new_guid returns a version 4 UUID string."""
        guid = CryptoOps().new_guid()
        assert uuid.UUID(guid).version == 4

    def test_new_guid_is_unique(self):
        """Test two guids differ."""
        crypto = CryptoOps()
        assert crypto.new_guid() != crypto.new_guid()

    def test_base64_methods_delegate(self):
        """Test the provider base64 methods round-trip."""
        crypto = CryptoOps()
        assert crypto.base64_url_decode(crypto.base64_url_encode(b"\x00\xff")) == b"\x00\xff"

    @pytest.mark.asyncio
    async def test_generate_pkce_codes(self):
        """Test the generated challenge is derived from the verifier."""
        codes = await CryptoOps().generate_pkce_codes()
        assert isinstance(codes, PkceCodes)
        assert len(codes.verifier) == 64
        assert codes.challenge == generate_code_challenge(codes.verifier)

    @pytest.mark.asyncio
    async def test_custom_verifier_length(self):
        """Test the verifier length setting is honored."""
        codes = await CryptoOps(verifier_length=43).generate_pkce_codes()
        assert len(codes.verifier) == 43

    def test_pkce_codes_immutable(self):
        """Test PkceCodes cannot be modified."""
        codes = PkceCodes(verifier="v", challenge="c")
        with pytest.raises(AttributeError):
            codes.verifier = "other"  # type: ignore[misc]
