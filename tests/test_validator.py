"""Tests for request value validation."""

import pytest

from oidc_authcode.oauth.errors import ConfigurationError
from oidc_authcode.oauth.validator import (
    validate_and_generate_scopes,
    validate_authorization_code,
    validate_code_challenge_params,
    validate_code_verifier,
    validate_prompt,
    validate_redirect_uri,
)

CLIENT_ID = "0813e1d1-ad72-46a9-8665-399bba48c201"


class TestValidateRedirectUri:
    """Tests for redirect URI validation."""

    def test_valid(self):
        """Test a present redirect URI passes."""
        validate_redirect_uri("http://localhost:8080/callback")

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_raises(self, value):
        """Test a missing redirect URI names the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_redirect_uri(value)
        assert exc_info.value.field == "redirect_uri"


class TestValidateAndGenerateScopes:
    """Tests for scope canonicalization."""

    def test_defaults_when_empty(self):
        """Test empty input yields the default OIDC scopes."""
        assert validate_and_generate_scopes([], CLIENT_ID) == ["openid", "profile", "offline_access"]
        assert validate_and_generate_scopes(None, CLIENT_ID) == ["openid", "profile", "offline_access"]

    def test_caller_scopes_come_first(self):
        """Test caller scopes precede the appended defaults."""
        scopes = validate_and_generate_scopes(["User.Read", "Mail.Read"], CLIENT_ID)
        assert scopes == ["User.Read", "Mail.Read", "openid", "profile", "offline_access"]

    def test_duplicates_removed(self):
        """Test repeated scopes appear once, first occurrence kept."""
        scopes = validate_and_generate_scopes(["b", "a", "b", "openid"], CLIENT_ID)
        assert scopes == ["b", "a", "openid", "profile", "offline_access"]

    def test_case_sensitive(self):
        """Test scopes differing only in case are both kept."""
        scopes = validate_and_generate_scopes(["User.Read", "user.read"], CLIENT_ID)
        assert scopes[:2] == ["User.Read", "user.read"]

    def test_client_id_scope_removed(self):
        """Test the scope equal to the client id is dropped."""
        scopes = validate_and_generate_scopes([CLIENT_ID, "User.Read"], CLIENT_ID)
        assert CLIENT_ID not in scopes
        assert scopes[0] == "User.Read"

    def test_surrounding_whitespace_stripped(self):
        """Test scopes are trimmed."""
        assert validate_and_generate_scopes([" User.Read "], CLIENT_ID)[0] == "User.Read"

    def test_without_defaults(self):
        """Test defaults can be left out."""
        assert validate_and_generate_scopes(["a"], CLIENT_ID, append_defaults=False) == ["a"]

    def test_empty_without_defaults_raises(self):
        """Test that no remaining scopes is an error."""
        with pytest.raises(ConfigurationError, match="at least one scope"):
            validate_and_generate_scopes([CLIENT_ID], CLIENT_ID, append_defaults=False)

    @pytest.mark.parametrize("bad", ["", "   ", None, 42])
    def test_invalid_entry_raises(self, bad):
        """Test blank and non-string entries are rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_and_generate_scopes([bad], CLIENT_ID)
        assert exc_info.value.field == "scopes"

    def test_embedded_space_raises(self):
        """Test a scope containing a space is rejected."""
        with pytest.raises(ConfigurationError, match="spaces"):
            validate_and_generate_scopes(["User.Read Mail.Read"], CLIENT_ID)


class TestValidatePrompt:
    """Tests for prompt validation."""

    @pytest.mark.parametrize("prompt", ["login", "none", "consent", "select_account"])
    def test_allowed_values(self, prompt):
        """Test each allowed prompt passes."""
        validate_prompt(prompt)

    def test_unknown_value_raises(self):
        """Test an unknown prompt names the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_prompt("always")
        assert exc_info.value.field == "prompt"

    def test_case_sensitive(self):
        """Test prompt values are matched exactly."""
        with pytest.raises(ConfigurationError):
            validate_prompt("LOGIN")


class TestValidateCodeChallengeParams:
    """Tests for PKCE parameter pairing."""

    def test_both_present(self):
        """Test a challenge with its method passes."""
        validate_code_challenge_params("challenge", "S256")

    def test_both_absent(self):
        """Test omitting both passes."""
        validate_code_challenge_params(None, None)

    def test_challenge_without_method_raises(self):
        """Test a lone challenge names the missing method."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_code_challenge_params("challenge", None)
        assert exc_info.value.field == "code_challenge_method"

    def test_method_without_challenge_raises(self):
        """Test a lone method names the missing challenge."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_code_challenge_params(None, "S256")
        assert exc_info.value.field == "code_challenge"

    def test_plain_method_accepted(self):
        """Test the plain method is allowed."""
        validate_code_challenge_params("challenge", "plain")

    def test_unknown_method_raises(self):
        """Test an unsupported method is rejected."""
        with pytest.raises(ConfigurationError, match="S512"):
            validate_code_challenge_params("challenge", "S512")


class TestRedemptionValues:
    """Tests for code and verifier presence checks."""

    def test_code_required(self):
        """Test a missing code names the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_authorization_code("")
        assert exc_info.value.field == "code"

    def test_verifier_required(self):
        """Test a missing verifier names the field."""
        with pytest.raises(ConfigurationError) as exc_info:
            validate_code_verifier(None)
        assert exc_info.value.field == "code_verifier"

    def test_present_values_pass(self):
        """Test present values pass."""
        validate_authorization_code("code")
        validate_code_verifier("verifier")
