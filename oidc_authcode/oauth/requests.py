"""Request objects accepted by AuthorizationCodeClient."""

from dataclasses import dataclass, field


@dataclass
class AuthorizationRequest:
    """Parameters for building an authorization URL.

    Attributes:
        redirect_uri: Where the server sends the code (required)
        scopes: Requested scopes; openid, profile and offline_access are
            always appended
        state: Opaque caller state, returned untouched in the response
        nonce: Optional OIDC nonce
        prompt: One of login, none, consent, select_account
        login_hint: Pre-fills the user name on the sign-in page
        domain_hint: Skips home realm discovery for the given domain
        correlation_id: Request id sent as client-request-id; generated if absent
        code_challenge: PKCE challenge, requires code_challenge_method
        code_challenge_method: PKCE method ("S256" or "plain")
        authority: Overrides the configured authority for this call
    """

    redirect_uri: str
    scopes: list[str] = field(default_factory=list)
    state: str | None = None
    nonce: str | None = None
    prompt: str | None = None
    login_hint: str | None = None
    domain_hint: str | None = None
    correlation_id: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None
    authority: str | None = None


@dataclass
class RedemptionRequest:
    """Parameters for redeeming an authorization code.

    The code_verifier must be the one whose challenge was sent with the
    authorization request; that pairing cannot be checked here.
    """

    code: str
    redirect_uri: str
    code_verifier: str
    scopes: list[str] = field(default_factory=list)
    correlation_id: str | None = None
    authority: str | None = None
