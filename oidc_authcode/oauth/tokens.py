"""Token results returned by code redemption.

Only the fields needed to hand tokens back to the caller and round-trip
them through the cache are read; the tokens themselves are not validated.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any


def token_cache_key(client_id: str, authority: str, scope: str | None) -> str:
    """Deterministic cache key: client, authority and scope set.

    Scopes are case-sensitive and keep their case; only the client id and
    authority are lowercased.
    """
    scopes = " ".join(sorted((scope or "").split()))
    return f"{client_id.lower()}-{authority.lower()}-accesstoken-{scopes}"


@dataclass
class TokenSet:
    """Tokens issued for an authorization code.

    Attributes:
        access_token: The access token string
        token_type: Token type (typically "Bearer")
        authority: Canonical authority that issued the tokens
        client_id: Client the tokens were issued to
        scope: Space-separated list of granted scopes
        refresh_token: Optional refresh token
        id_token: Optional OIDC id token (not verified)
        client_info: Optional base64url client_info blob
        expires_at: When the access token expires (UTC datetime)
        issued_at: When the token was issued (UTC datetime)
    """

    access_token: str
    token_type: str
    authority: str
    client_id: str
    scope: str | None = None
    refresh_token: str | None = None
    id_token: str | None = None
    client_info: str | None = None
    expires_at: datetime | None = None
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def is_expired(self, buffer_seconds: int = 30) -> bool:
        """Check if the access token is expired or nearly expired.

        Args:
            buffer_seconds: Consider token expired this many seconds before
                actual expiry to allow for clock skew and request latency.
        """
        if self.expires_at is None:
            # No expiry information - the resource server decides
            return False

        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)

        return datetime.now(timezone.utc) >= (expires_at - timedelta(seconds=buffer_seconds))

    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)

    def to_dict(self) -> dict[str, Any]:
        """Serialize token set to dictionary for storage."""
        data: dict[str, Any] = {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "authority": self.authority,
            "client_id": self.client_id,
            "issued_at": self.issued_at.isoformat(),
        }

        for name in ("scope", "refresh_token", "id_token", "client_info"):
            value = getattr(self, name)
            if value:
                data[name] = value

        if self.expires_at:
            data["expires_at"] = self.expires_at.isoformat()

        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenSet":
        """Deserialize token set from dictionary (via to_dict)."""
        expires_at = None
        if data.get("expires_at"):
            expires_at = datetime.fromisoformat(data["expires_at"])
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=timezone.utc)

        issued_at = datetime.now(timezone.utc)
        if data.get("issued_at"):
            issued_at = datetime.fromisoformat(data["issued_at"])
            if issued_at.tzinfo is None:
                issued_at = issued_at.replace(tzinfo=timezone.utc)

        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type", "Bearer"),
            authority=data["authority"],
            client_id=data["client_id"],
            scope=data.get("scope"),
            refresh_token=data.get("refresh_token"),
            id_token=data.get("id_token"),
            client_info=data.get("client_info"),
            expires_at=expires_at,
            issued_at=issued_at,
        )

    @classmethod
    def from_token_response(
        cls,
        response: dict[str, Any],
        authority: str,
        client_id: str,
        requested_scope: str | None = None,
    ) -> "TokenSet":
        """Create a TokenSet from a token endpoint response.

        The granted scope defaults to the requested one when the server
        omits it.

        Raises:
            KeyError: If access_token is missing
            ValueError: If expires_in is not a number
        """
        now = datetime.now(timezone.utc)

        expires_at = None
        if "expires_in" in response:
            try:
                expires_in = int(response["expires_in"])
            except TypeError as e:
                raise ValueError(f"expires_in is not a number: {response['expires_in']!r}") from e
            expires_at = now + timedelta(seconds=expires_in)

        return cls(
            access_token=response["access_token"],
            token_type=response.get("token_type", "Bearer"),
            authority=authority,
            client_id=client_id,
            scope=response.get("scope", requested_scope),
            refresh_token=response.get("refresh_token"),
            id_token=response.get("id_token"),
            client_info=response.get("client_info"),
            expires_at=expires_at,
            issued_at=now,
        )

    def info(self) -> dict[str, Any]:
        """Non-sensitive token info for display."""
        return {
            "authority": self.authority,
            "client_id": self.client_id,
            "token_type": self.token_type,
            "scope": self.scope,
            "has_refresh_token": self.has_refresh_token(),
            "has_id_token": bool(self.id_token),
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "is_expired": self.is_expired(),
        }
