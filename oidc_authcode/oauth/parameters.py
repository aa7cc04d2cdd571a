"""Builds the ordered parameter sets sent to the authorization server.

A parameter set is a plain insertion-ordered dict. Validation always runs
before a value is generated, so an invalid request never consumes a guid
and never reaches the network.
"""

from .configuration import ClientConfiguration
from .constants import (
    AUTHORIZATION_CODE_GRANT,
    CLIENT_INFO_REQUESTED,
    CODE_RESPONSE_TYPE,
    DEFAULT_RESPONSE_MODE,
    ServerParamKeys,
)
from .requests import AuthorizationRequest, RedemptionRequest
from .state import set_request_state
from .validator import (
    validate_and_generate_scopes,
    validate_authorization_code,
    validate_code_challenge_params,
    validate_code_verifier,
    validate_prompt,
    validate_redirect_uri,
)

ParameterSet = dict[str, str]


def validate_auth_code_url_request(request: AuthorizationRequest, client_id: str) -> list[str]:
    """Run every static check on an authorization request.

    Returns:
        The canonical scope list
    """
    scopes = validate_and_generate_scopes(request.scopes, client_id)
    validate_redirect_uri(request.redirect_uri)
    if request.prompt:
        validate_prompt(request.prompt)
    validate_code_challenge_params(request.code_challenge, request.code_challenge_method)
    return scopes


def generate_auth_code_url_params(
    request: AuthorizationRequest, config: ClientConfiguration
) -> ParameterSet:
    """Build the query parameters for the authorization URL.

    Raises:
        ConfigurationError: If the request violates an invariant
    """
    scopes = validate_auth_code_url_request(request, config.client_id)

    params: ParameterSet = {
        ServerParamKeys.CLIENT_ID: config.client_id,
        ServerParamKeys.SCOPE: " ".join(scopes),
        ServerParamKeys.REDIRECT_URI: request.redirect_uri,
        # Library guid is always present, caller state is optional
        ServerParamKeys.STATE: set_request_state(request.state, config.crypto.new_guid()),
    }

    if request.prompt:
        params[ServerParamKeys.PROMPT] = request.prompt

    if request.login_hint:
        params[ServerParamKeys.LOGIN_HINT] = request.login_hint

    if request.domain_hint:
        params[ServerParamKeys.DOMAIN_HINT] = request.domain_hint

    if request.nonce:
        params[ServerParamKeys.NONCE] = request.nonce

    params[ServerParamKeys.CLIENT_REQUEST_ID] = (
        request.correlation_id or config.crypto.new_guid()
    )
    params[ServerParamKeys.RESPONSE_TYPE] = CODE_RESPONSE_TYPE
    params[ServerParamKeys.RESPONSE_MODE] = DEFAULT_RESPONSE_MODE.value

    if request.code_challenge and request.code_challenge_method:
        params[ServerParamKeys.CODE_CHALLENGE] = request.code_challenge
        params[ServerParamKeys.CODE_CHALLENGE_METHOD] = request.code_challenge_method

    return params


def generate_auth_code_params(
    request: RedemptionRequest, config: ClientConfiguration
) -> ParameterSet:
    """Build the form parameters for redeeming an authorization code.

    Raises:
        ConfigurationError: If the redirect URI, code or verifier is missing
    """
    validate_redirect_uri(request.redirect_uri)
    validate_authorization_code(request.code)
    validate_code_verifier(request.code_verifier)
    scopes = validate_and_generate_scopes(request.scopes, config.client_id)

    return {
        ServerParamKeys.CLIENT_ID: config.client_id,
        ServerParamKeys.SCOPE: " ".join(scopes),
        ServerParamKeys.REDIRECT_URI: request.redirect_uri,
        ServerParamKeys.GRANT_TYPE: AUTHORIZATION_CODE_GRANT,
        ServerParamKeys.CODE: request.code,
        ServerParamKeys.RESPONSE_TYPE: CODE_RESPONSE_TYPE,
        ServerParamKeys.CLIENT_INFO: CLIENT_INFO_REQUESTED,
        ServerParamKeys.CODE_VERIFIER: request.code_verifier,
        ServerParamKeys.CLIENT_REQUEST_ID: request.correlation_id or config.crypto.new_guid(),
    }
