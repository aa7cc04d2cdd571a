"""Config discovery and loading for the authcode CLI."""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .oauth.cache import CacheStorage, EncryptedFileCache, InMemoryCache
from .oauth.configuration import ClientConfiguration, build_configuration
from .oauth.constants import DEFAULT_AUTHORITY
from .oauth.errors import ConfigurationError

CONFIG_FILE_NAME = "authcode.json"

# Directories to search for the config file, in priority order
CONFIG_SEARCH_DIRS = [
    Path("."),
    Path(".authcode"),
    Path.home() / ".config" / "authcode",
]

# Env file search paths in priority order
ENV_SEARCH_PATHS = [
    Path(".env"),
    Path.home() / ".config" / "authcode" / ".env",
]

# Environment variables that override config file values
ENV_CLIENT_ID = "AUTHCODE_CLIENT_ID"
ENV_AUTHORITY = "AUTHCODE_AUTHORITY"
ENV_REDIRECT_URI = "AUTHCODE_REDIRECT_URI"


def _resolve_env_vars(value: str) -> str:
    """Resolve ${VAR} patterns in a string from environment variables.

    Missing vars resolve to empty string.
    """
    if "${" not in value:
        return value

    result = value
    for match in re.finditer(r'\$\{([^}]+)\}', value):
        env_value = os.environ.get(match.group(1), "")
        result = result.replace(match.group(0), env_value)
    return result


@dataclass
class AppConfig:
    """Settings read from authcode.json and the environment."""

    client_id: str
    authority: str = DEFAULT_AUTHORITY
    redirect_uri: str | None = None
    cache: str = "memory"  # "memory" or "encrypted-file"
    config_path: Path | None = None
    env_path: Path | None = None

    def is_persistent_cache(self) -> bool:
        return self.cache == "encrypted-file"

    def build_cache(self) -> CacheStorage:
        """Create the cache named by the cache setting.

        Raises:
            ConfigurationError: If the cache type is unknown
        """
        if self.cache == "memory":
            return InMemoryCache()
        if self.cache == "encrypted-file":
            return EncryptedFileCache()
        raise ConfigurationError(
            "cache", f"unknown cache type {self.cache!r} (use 'memory' or 'encrypted-file')"
        )

    def to_client_configuration(self) -> ClientConfiguration:
        """Build the engine configuration for these settings.

        Raises:
            ConfigurationError: If the client id is missing or cache type unknown
        """
        return build_configuration(
            ClientConfiguration(
                client_id=self.client_id,
                authority=self.authority,
                redirect_uri=self.redirect_uri,
                cache=self.build_cache(),
            )
        )


def find_config_file(explicit_path: Path | None = None) -> Path | None:
    """Find authcode.json, checking the explicit path first."""
    if explicit_path:
        if explicit_path.exists():
            return explicit_path
        return None

    for search_dir in CONFIG_SEARCH_DIRS:
        path = search_dir / CONFIG_FILE_NAME
        if path.exists():
            return path
    return None


def find_env_file(explicit_path: Path | None = None) -> Path | None:
    """Find the .env file, checking project then user level."""
    if explicit_path:
        if explicit_path.exists():
            return explicit_path
        return None

    for path in ENV_SEARCH_PATHS:
        if path.exists():
            return path
    return None


def parse_app_config(data: dict[str, Any]) -> dict[str, str]:
    """Read the known keys from config JSON, resolving ${VAR} references.

    Accepts both camelCase and snake_case keys.
    """
    aliases = {
        "clientId": "client_id",
        "client_id": "client_id",
        "authority": "authority",
        "redirectUri": "redirect_uri",
        "redirect_uri": "redirect_uri",
        "cache": "cache",
    }
    values: dict[str, str] = {}
    for key, value in data.items():
        if key in aliases and isinstance(value, str):
            values[aliases[key]] = _resolve_env_vars(value)
    return values


def load_config(
    config_path: Path | None = None,
    env_path: Path | None = None,
) -> AppConfig:
    """Load settings from authcode.json, .env and environment overrides.

    The config file is optional when AUTHCODE_CLIENT_ID is set.

    Args:
        config_path: Explicit path to config file (optional)
        env_path: Explicit path to .env file (optional)

    Raises:
        ConfigurationError: If no client id can be found
        json.JSONDecodeError: If the config file is invalid JSON
    """
    env_file = find_env_file(env_path)
    if env_file:
        load_dotenv(env_file)

    values: dict[str, str] = {}
    config_file = find_config_file(config_path)
    if config_file:
        with open(config_file) as f:
            values.update(parse_app_config(json.load(f)))

    overrides = {
        "client_id": os.environ.get(ENV_CLIENT_ID),
        "authority": os.environ.get(ENV_AUTHORITY),
        "redirect_uri": os.environ.get(ENV_REDIRECT_URI),
    }
    values.update({k: v for k, v in overrides.items() if v})

    if not values.get("client_id"):
        searched = ", ".join(str(d / CONFIG_FILE_NAME) for d in CONFIG_SEARCH_DIRS)
        raise ConfigurationError(
            "client_id",
            f"no client id configured.\n\n"
            f"Set {ENV_CLIENT_ID} or create {CONFIG_FILE_NAME} in one of:\n"
            f"  {searched}\n\n"
            f'Example:\n{{\n  "clientId": "00000000-0000-0000-0000-000000000000",\n'
            f'  "authority": "{DEFAULT_AUTHORITY}",\n'
            f'  "redirectUri": "http://localhost:8080/callback"\n}}',
        )

    return AppConfig(
        client_id=values["client_id"],
        authority=values.get("authority") or DEFAULT_AUTHORITY,
        redirect_uri=values.get("redirect_uri"),
        cache=values.get("cache", "memory"),
        config_path=config_file,
        env_path=env_file,
    )
