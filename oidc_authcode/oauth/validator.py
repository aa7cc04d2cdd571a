"""Validation of caller-supplied request values.

Every function is pure and raises ConfigurationError naming the offending
field. Nothing here performs I/O.
"""

from collections.abc import Iterable

from .constants import CODE_CHALLENGE_METHODS, DEFAULT_SCOPES, Prompt
from .errors import ConfigurationError


def validate_redirect_uri(redirect_uri: str | None) -> None:
    if not redirect_uri:
        raise ConfigurationError("redirect_uri", "a redirect URI is required")


def validate_and_generate_scopes(
    scopes: Iterable[str] | None,
    client_id: str,
    append_defaults: bool = True,
) -> list[str]:
    """Validate scopes and return the canonical ordered scope list.

    Scopes are case-sensitive and deduplicated on insertion, keeping the
    first occurrence. The scope equal to the client id is reserved and
    removed. Missing default scopes (openid, profile, offline_access) are
    appended after the caller's scopes.

    Args:
        scopes: Caller scopes, may be None or empty
        client_id: The application's client id
        append_defaults: Append the default OIDC scopes

    Returns:
        Ordered list of unique scopes

    Raises:
        ConfigurationError: If a scope is not a non-empty string, or no
            scopes remain
    """
    result: list[str] = []
    for scope in scopes or []:
        if not isinstance(scope, str) or not scope.strip():
            raise ConfigurationError("scopes", f"scopes must be non-empty strings, got {scope!r}")
        scope = scope.strip()
        if " " in scope:
            raise ConfigurationError("scopes", f"a scope may not contain spaces: {scope!r}")
        if scope == client_id or scope in result:
            continue
        result.append(scope)

    if append_defaults:
        result.extend(s for s in DEFAULT_SCOPES if s not in result)

    if not result:
        raise ConfigurationError("scopes", "at least one scope is required")

    return result


def validate_prompt(prompt: str | None) -> None:
    """Raise unless prompt is one of login, none, consent, select_account."""
    allowed = [p.value for p in Prompt]
    if prompt not in allowed:
        raise ConfigurationError(
            "prompt", f"{prompt!r} is not one of {', '.join(allowed)}"
        )


def validate_code_challenge_params(
    code_challenge: str | None, code_challenge_method: str | None
) -> None:
    """PKCE challenge and method must be supplied together."""
    if bool(code_challenge) != bool(code_challenge_method):
        missing = "code_challenge_method" if code_challenge else "code_challenge"
        raise ConfigurationError(
            missing,
            "code_challenge and code_challenge_method must be supplied together",
        )
    if code_challenge_method and code_challenge_method not in CODE_CHALLENGE_METHODS:
        raise ConfigurationError(
            "code_challenge_method",
            f"{code_challenge_method!r} is not one of {', '.join(sorted(CODE_CHALLENGE_METHODS))}",
        )


def validate_code_verifier(code_verifier: str | None) -> None:
    if not code_verifier:
        raise ConfigurationError("code_verifier", "a PKCE code verifier is required")


def validate_authorization_code(code: str | None) -> None:
    if not code:
        raise ConfigurationError("code", "an authorization code is required")
