"""Encoding of the state parameter.

The wire state is "<library guid>|<caller state>". The guid comes from the
crypto provider and is the CSRF defense; the caller segment is passed
through untouched. The delimiter is not escaped, so decoding splits at its
first occurrence.
"""

import hmac

from .constants import RESOURCE_DELIM
from .errors import StateMismatchError


def set_request_state(user_state: str | None, library_guid: str) -> str:
    """Combine the library guid with caller state.

    Returns the guid alone when there is no caller state.
    """
    if user_state:
        return f"{library_guid}{RESOURCE_DELIM}{user_state}"
    return library_guid


def get_user_request_state(server_state: str | None) -> str:
    """Extract the caller segment from a state returned by the server.

    Returns an empty string if the state is empty or has no delimiter.
    """
    if not server_state:
        return ""

    _, delim, user_state = server_state.partition(RESOURCE_DELIM)
    if not delim:
        return ""
    return user_state


def get_library_state(server_state: str | None) -> str:
    """Extract the library anti-forgery segment from a returned state."""
    if not server_state:
        return ""
    return server_state.partition(RESOURCE_DELIM)[0]


def validate_server_state(expected_state: str, server_state: str | None) -> str:
    """Check a returned state against the one that was sent.

    Args:
        expected_state: The full state emitted in the authorization URL
        server_state: The state received on the redirect

    Returns:
        The caller segment of the state

    Raises:
        StateMismatchError: If the states differ
    """
    # Constant-time comparison to prevent timing attacks
    if not server_state or not hmac.compare_digest(server_state, expected_state):
        raise StateMismatchError(
            "State mismatch in authorization response - possible CSRF attack"
        )
    return get_user_request_state(server_state)
