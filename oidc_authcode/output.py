"""Rendering of CLI results and errors, as aligned text or a JSON envelope."""

import json
import sys
from typing import Any, NoReturn

import click

from .oauth.errors import (
    CacheStorageError,
    ConfigurationError,
    EndpointDiscoveryError,
    TokenRedemptionError,
)

# Hints shown under an error, most specific class first
ERROR_HINTS: list[tuple[type[Exception], str]] = [
    (EndpointDiscoveryError, "Check the authority URL and your network connection."),
    (
        TokenRedemptionError,
        "Authorization codes are single use; check the code, verifier and redirect URI.",
    ),
    (CacheStorageError, "Run 'authcode cache clear' to reset the cache."),
]


def hint_for(error: Exception) -> str | None:
    for error_class, hint in ERROR_HINTS:
        if isinstance(error, error_class):
            return hint
    return None


def envelope(data: Any) -> str:
    """Wrap a result in the {"success": true, "data": ...} envelope."""
    return json.dumps({"success": True, "data": data}, indent=2, default=str)


def error_payload(
    error: Exception,
    error_type: str | None = None,
    help_text: str | None = None,
) -> dict[str, Any]:
    """Describe an error for JSON output.

    ConfigurationError adds the offending field and EndpointDiscoveryError
    the authority. Tracebacks are never included.
    """
    payload: dict[str, Any] = {
        "type": error_type or type(error).__name__,
        "message": str(error),
        "help": help_text or hint_for(error) or "",
    }
    if isinstance(error, ConfigurationError):
        payload["field"] = error.field
    elif isinstance(error, EndpointDiscoveryError):
        payload["authority"] = error.authority
    return payload


class OutputHandler:
    """Writes command results in the mode chosen by --json."""

    def __init__(self, json_mode: bool = False):
        self.json_mode = json_mode

    def success(self, data: Any, human_message: str | None = None) -> None:
        if self.json_mode:
            click.echo(envelope(data))
        elif human_message is not None:
            click.echo(human_message)
        else:
            click.echo(json.dumps(data, indent=2, default=str))

    def fields(self, data: dict[str, Any]) -> None:
        """Print one aligned key/value line per entry (None prints blank)."""
        if self.json_mode:
            click.echo(envelope(data))
            return

        width = max((len(k) for k in data), default=0)
        for key, value in data.items():
            click.echo(f"{click.style(key.ljust(width), bold=True)}  {'' if value is None else value}")

    def error(
        self,
        error: Exception,
        error_type: str | None = None,
        help_text: str | None = None,
    ) -> NoReturn:
        """Report a failure and exit with status 1."""
        payload = error_payload(error, error_type, help_text)
        if self.json_mode:
            click.echo(json.dumps({"success": False, "error": payload}, indent=2))
        else:
            click.secho(f"Error: {error}", fg="red", err=True)
            if payload["help"]:
                click.echo(f"\n{payload['help']}", err=True)
        sys.exit(1)
