"""Protocol constants for the OAuth2/OIDC authorization code flow."""

from enum import Enum

# Authority used when neither the configuration nor the request names one
DEFAULT_AUTHORITY = "https://login.microsoftonline.com/common/"

# Placeholder some providers put in endpoint templates
TENANT_PLACEHOLDER = "{tenant}"

# Metadata documents tried during discovery, relative to the canonical authority
DISCOVERY_PATHS = [
    "v2.0/.well-known/openid-configuration",
    ".well-known/openid-configuration",
]

# Scopes added to every authorization request, in this order
OPENID_SCOPE = "openid"
PROFILE_SCOPE = "profile"
OFFLINE_ACCESS_SCOPE = "offline_access"
DEFAULT_SCOPES = [OPENID_SCOPE, PROFILE_SCOPE, OFFLINE_ACCESS_SCOPE]

# Separates the library anti-forgery guid from caller state
RESOURCE_DELIM = "|"

CODE_RESPONSE_TYPE = "code"
AUTHORIZATION_CODE_GRANT = "authorization_code"
CLIENT_INFO_REQUESTED = "1"

# PKCE challenge methods (RFC 7636)
S256_CODE_CHALLENGE_METHOD = "S256"
PLAIN_CODE_CHALLENGE_METHOD = "plain"
CODE_CHALLENGE_METHODS = {S256_CODE_CHALLENGE_METHOD, PLAIN_CODE_CHALLENGE_METHOD}


class ServerParamKeys:
    """Query/form parameter names understood by the authorization server."""

    CLIENT_ID = "client_id"
    SCOPE = "scope"
    REDIRECT_URI = "redirect_uri"
    STATE = "state"
    PROMPT = "prompt"
    LOGIN_HINT = "login_hint"
    DOMAIN_HINT = "domain_hint"
    NONCE = "nonce"
    CLIENT_REQUEST_ID = "client-request-id"
    RESPONSE_TYPE = "response_type"
    RESPONSE_MODE = "response_mode"
    CODE_CHALLENGE = "code_challenge"
    CODE_CHALLENGE_METHOD = "code_challenge_method"
    CODE = "code"
    CODE_VERIFIER = "code_verifier"
    CLIENT_INFO = "client_info"
    GRANT_TYPE = "grant_type"


class Prompt(str, Enum):
    """Allowed values of the prompt parameter."""

    LOGIN = "login"
    NONE = "none"
    CONSENT = "consent"
    SELECT_ACCOUNT = "select_account"


class ResponseMode(str, Enum):
    """How the authorization server returns the code."""

    QUERY = "query"
    FRAGMENT = "fragment"
    FORM_POST = "form_post"


# Mode requested for the authorization code flow
DEFAULT_RESPONSE_MODE = ResponseMode.QUERY
