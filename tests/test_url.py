"""Tests for query string and URL serialization."""

from unittest.mock import MagicMock

from oidc_authcode.oauth.url import create_query_string, create_url, encode_component


class TestEncodeComponent:
    """Tests for single value encoding."""

    def test_space_becomes_percent_20(self):
        """Test spaces are encoded as %20, not +."""
        assert encode_component("openid profile") == "openid%20profile"

    def test_reserved_characters_encoded(self):
        """Test URL delimiters are percent-encoded."""
        assert encode_component("https://a/b?c=d&e") == "https%3A%2F%2Fa%2Fb%3Fc%3Dd%26e"

    def test_unreserved_marks_kept(self):
        """Test the characters encodeURIComponent leaves alone."""
        assert encode_component("a-b_c.d!e~f*g'h(i)") == "a-b_c.d!e~f*g'h(i)"

    def test_pipe_encoded(self):
        """Test the state delimiter is encoded."""
        assert encode_component("guid|state") == "guid%7Cstate"


class TestCreateQueryString:
    """Tests for parameter set serialization."""

    def test_preserves_insertion_order(self):
        """Test keys appear in insertion order."""
        params = {"z": "1", "a": "2", "m": "3"}
        assert create_query_string(params) == "z=1&a=2&m=3"

    def test_empty_values_omitted(self):
        """Test empty values never appear in the output."""
        params = {"a": "1", "b": "", "c": "3"}
        assert create_query_string(params) == "a=1&c=3"

    def test_empty_params(self):
        """Test an empty set serializes to an empty string."""
        assert create_query_string({}) == ""


class TestCreateUrl:
    """Tests for appending parameters to the authorization endpoint."""

    def test_appends_with_question_mark(self):
        """Test a plain endpoint gets a ? separator."""
        authority = MagicMock(authorization_endpoint="https://idp.example.com/t/authorize")
        url = create_url({"a": "1"}, authority)
        assert url == "https://idp.example.com/t/authorize?a=1"

    def test_appends_to_existing_query(self):
        """Test an endpoint with a query gets an & separator."""
        authority = MagicMock(authorization_endpoint="https://idp.example.com/authorize?p=x")
        url = create_url({"a": "1"}, authority)
        assert url == "https://idp.example.com/authorize?p=x&a=1"
