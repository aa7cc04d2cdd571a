"""CLI entry point for oidc-authcode."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click

from . import __version__
from .config import AppConfig, load_config
from .oauth import (
    AuthCodeError,
    AuthorizationCodeClient,
    AuthorizationRequest,
    CacheStorage,
    ConfigurationError,
    CryptoOps,
    Prompt,
    RedemptionRequest,
    get_library_state,
    get_user_request_state,
)
from .oauth.constants import S256_CODE_CHALLENGE_METHOD
from .output import OutputHandler

logger = logging.getLogger("authcode")


@click.group()
@click.option("--json", "json_mode", is_flag=True, help="Output in JSON format")
@click.option("--config", "config_path", type=click.Path(exists=True), help="Path to authcode.json")
@click.option("--env-file", "env_path", type=click.Path(exists=True), help="Path to .env file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context, json_mode: bool, config_path: str | None, env_path: str | None, verbose: bool) -> None:
    """oidc-authcode - Build OAuth2/OIDC authorization code flow requests."""
    ctx.ensure_object(dict)
    ctx.obj["json_mode"] = json_mode
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["env_path"] = Path(env_path) if env_path else None
    ctx.obj["output"] = OutputHandler(json_mode)

    # Configure logging based on verbosity
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING)


def get_config(ctx: click.Context) -> AppConfig:
    """Get config from context, handling errors."""
    output: OutputHandler = ctx.obj["output"]
    try:
        return load_config(ctx.obj["config_path"], ctx.obj["env_path"])
    except ConfigurationError as e:
        output.error(e, help_text="Provide a client id in authcode.json or AUTHCODE_CLIENT_ID.")
    except json.JSONDecodeError as e:
        output.error(
            e,
            error_type="ConfigParseError",
            help_text="The config file contains invalid JSON. Check for syntax errors.",
        )


def build_client(config: AppConfig) -> AuthorizationCodeClient:
    """Create the client for a loaded configuration."""
    logger.debug(f"Client {config.client_id} (authority {config.authority}, cache {config.cache})")
    return AuthorizationCodeClient(config.to_client_configuration())


@main.command()
@click.option("--scope", "-s", "scopes", multiple=True, help="Scope to request (repeatable)")
@click.option("--redirect-uri", "-r", help="Redirect URI (default: from config)")
@click.option("--state", help="Opaque state returned with the response")
@click.option("--prompt", type=click.Choice([p.value for p in Prompt]), help="Prompt behavior")
@click.option("--login-hint", help="Pre-fill the user name")
@click.option("--domain-hint", help="Skip home realm discovery for this domain")
@click.option("--nonce", help="OIDC nonce")
@click.option("--authority", "-a", help="Override the configured authority")
@click.option("--pkce", is_flag=True, help="Generate a PKCE pair and add its challenge")
@click.pass_context
def url(
    ctx: click.Context,
    scopes: tuple[str, ...],
    redirect_uri: str | None,
    state: str | None,
    prompt: str | None,
    login_hint: str | None,
    domain_hint: str | None,
    nonce: str | None,
    authority: str | None,
    pkce: bool,
) -> None:
    """Print an authorization URL."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    async def _build() -> dict[str, str | None]:
        client = build_client(config)
        codes = await client.generate_pkce_codes() if pkce else None
        request = AuthorizationRequest(
            redirect_uri=redirect_uri or config.redirect_uri or "",
            scopes=list(scopes),
            state=state,
            nonce=nonce,
            prompt=prompt,
            login_hint=login_hint,
            domain_hint=domain_hint,
            authority=authority,
            code_challenge=codes.challenge if codes else None,
            code_challenge_method=S256_CODE_CHALLENGE_METHOD if codes else None,
        )
        result = await client.prepare_auth_code_url(request)
        return {
            "url": result.url,
            "state": result.state,
            "correlation_id": result.correlation_id,
            "code_verifier": codes.verifier if codes else None,
        }

    try:
        data = asyncio.run(_build())
    except AuthCodeError as e:
        output.error(e)

    human = data["url"] or ""
    if data["code_verifier"]:
        human += f"\n\nCode verifier (keep for redeem): {data['code_verifier']}"
    output.success(data, human_message=human)


@main.command()
@click.pass_context
def pkce(ctx: click.Context) -> None:
    """Print a fresh PKCE verifier/challenge pair (S256)."""
    output: OutputHandler = ctx.obj["output"]
    codes = asyncio.run(CryptoOps().generate_pkce_codes())
    output.fields(
        {
            "verifier": codes.verifier,
            "challenge": codes.challenge,
            "method": S256_CODE_CHALLENGE_METHOD,
        }
    )


@main.command("state")
@click.argument("value")
@click.pass_context
def decode_state(ctx: click.Context, value: str) -> None:
    """Split a returned state VALUE into its library and caller parts."""
    output: OutputHandler = ctx.obj["output"]
    output.fields(
        {
            "library_state": get_library_state(value),
            "user_state": get_user_request_state(value),
        }
    )


@main.command()
@click.option("--authority", "-a", help="Authority to resolve (default: from config)")
@click.pass_context
def discover(ctx: click.Context, authority: str | None) -> None:
    """Resolve and print an authority's endpoints."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    async def _resolve() -> dict[str, str | None]:
        client = build_client(config)
        resolved = await client.authority_resolver.resolve(authority)
        return {
            "authority": resolved.canonical_authority,
            "host": resolved.host,
            "tenant": resolved.tenant,
            "issuer": resolved.issuer,
            "authorization_endpoint": resolved.authorization_endpoint,
            "token_endpoint": resolved.token_endpoint,
            "end_session_endpoint": resolved.end_session_endpoint,
        }

    try:
        data = asyncio.run(_resolve())
    except AuthCodeError as e:
        output.error(e)

    output.fields(data)


@main.command()
@click.option("--code", "-c", required=True, help="Authorization code from the redirect")
@click.option("--code-verifier", required=True, help="PKCE verifier printed by 'url --pkce'")
@click.option("--redirect-uri", "-r", help="Redirect URI used for the authorization request")
@click.option("--scope", "-s", "scopes", multiple=True, help="Scope to request (repeatable)")
@click.option("--authority", "-a", help="Override the configured authority")
@click.pass_context
def redeem(
    ctx: click.Context,
    code: str,
    code_verifier: str,
    redirect_uri: str | None,
    scopes: tuple[str, ...],
    authority: str | None,
) -> None:
    """Redeem an authorization code and print token info (no secrets)."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)

    async def _redeem() -> dict:
        client = build_client(config)
        token = await client.acquire_token_by_code(
            RedemptionRequest(
                code=code,
                redirect_uri=redirect_uri or config.redirect_uri or "",
                code_verifier=code_verifier,
                scopes=list(scopes),
                authority=authority,
            )
        )
        return {**token.info(), "cache": config.cache}

    try:
        data = asyncio.run(_redeem())
    except AuthCodeError as e:
        output.error(e)

    output.fields(data)


@main.group()
def cache() -> None:
    """Manage the configured token cache."""
    pass


def get_persistent_cache(ctx: click.Context) -> CacheStorage:
    """The cache redeem writes to, if it outlives a single command."""
    output: OutputHandler = ctx.obj["output"]
    config = get_config(ctx)
    try:
        storage = config.build_cache()
    except AuthCodeError as e:
        output.error(e)
    if not config.is_persistent_cache():
        output.error(
            ConfigurationError(
                "cache",
                f"the {config.cache!r} cache does not outlive a single command, so there is nothing to manage",
            ),
            help_text='Set "cache": "encrypted-file" in authcode.json to keep tokens between runs.',
        )
    return storage


@cache.command("list")
@click.pass_context
def cache_list(ctx: click.Context) -> None:
    """List cache keys."""
    output: OutputHandler = ctx.obj["output"]
    try:
        keys = get_persistent_cache(ctx).list_keys()
    except AuthCodeError as e:
        output.error(e)

    output.success(keys, human_message="\n".join(keys) if keys else "Cache is empty")


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete every cached entry."""
    output: OutputHandler = ctx.obj["output"]
    get_persistent_cache(ctx).clear()
    output.success({"cleared": True}, human_message="Cache cleared")


if __name__ == "__main__":
    main()
