"""
Routing of authorization management requests and responses.

Requests and responses driven through an interactive browser flow come in
two variants, authorization-code and end session. They travel through
untyped channels (persisted JSON text, redirect URIs, intent-like carriers of
string extras); this module turns that opaque data back into the right
concrete message.

Every message carries its variant as ``kind``. Once a message has been
parsed, routing is a lookup on that tag.
"""

from typing import Any, Callable, Dict, Mapping, Tuple, Union

from ..shared import json_util
from ..shared.exceptions import InvalidArgumentError, OAuthRedirectError
from ..shared.logging_utils import ComponentType, MessageType, create_logger
from ..shared.oauth_models import ManagementKind, OAuthError
from ..shared.preconditions import check_has_scheme, check_not_none
from ..shared.uri_util import get_query_parameters
from .authorization import AuthorizationRequest, AuthorizationResponse
from .end_session import EndSessionRequest, EndSessionResponse

AuthorizationManagementRequest = Union[AuthorizationRequest, EndSessionRequest]
AuthorizationManagementResponse = Union[AuthorizationResponse, EndSessionResponse]

# String extras handed back by the interactive flow
IntentData = Mapping[str, str]

PARAM_ERROR = "error"

# Shape tests are tried in order; the first match wins
_REQUEST_SHAPES: Tuple[Tuple[ManagementKind, Callable[[Mapping[str, Any]], bool],
                             Callable[[Dict[str, Any]], AuthorizationManagementRequest]], ...] = (
    (ManagementKind.AUTHORIZATION,
     AuthorizationRequest.is_authorization_request,
     AuthorizationRequest.json_deserialize),
    (ManagementKind.END_SESSION,
     EndSessionRequest.is_end_session_request,
     EndSessionRequest.json_deserialize),
)

_RESPONSE_BUILDERS = {
    ManagementKind.AUTHORIZATION: AuthorizationResponse.Builder,
    ManagementKind.END_SESSION: EndSessionResponse.Builder,
}

# End session markers are checked before authorization markers
_RESPONSE_MARKERS: Tuple[Tuple[ManagementKind, Callable[[IntentData], bool],
                               Callable[[IntentData], AuthorizationManagementResponse]], ...] = (
    (ManagementKind.END_SESSION,
     EndSessionResponse.contains_end_session_response,
     EndSessionResponse.from_intent),
    (ManagementKind.AUTHORIZATION,
     AuthorizationResponse.contains_authorization_response,
     AuthorizationResponse.from_intent),
)

logger = create_logger(ComponentType.DISPATCHER.value)


def request_from(json_str: str) -> AuthorizationManagementRequest:
    """
    Read a request from the JSON text produced by either
    ``AuthorizationRequest.json_serialize_string`` or
    ``EndSessionRequest.json_serialize_string``.

    Raises:
        MalformedJsonError: If the text is not a JSON object, or the matched
            variant's fields are malformed
        InvalidArgumentError: If the JSON matches no known request shape
    """
    check_not_none(json_str, "jsonStr can not be null")
    json_obj = json_util.parse_json_object(json_str)

    for kind, matches, deserialize in _REQUEST_SHAPES:
        if matches(json_obj):
            logger.log_oauth_message(
                "STORAGE", ComponentType.DISPATCHER.value,
                MessageType.DISPATCH.value,
                {"direction": "request", "kind": kind.value}
            )
            return deserialize(json_obj)

    logger.log_error(
        "UNKNOWN_REQUEST",
        "No authorization management request matches this JSON",
        {"keys": list(json_obj.keys())}
    )
    raise InvalidArgumentError(
        "No AuthorizationManagementRequest found matching to this json schema"
    )


def response_with(request: AuthorizationManagementRequest,
                  uri: str) -> AuthorizationManagementResponse:
    """
    Build the response to a request from the redirect URI that completed
    its interactive flow.

    Raises:
        InvalidArgumentError: If the request is not a known variant, the URI
            has no scheme, or the returned state does not match the request
        OAuthRedirectError: If the redirect carries an OAuth error response
    """
    check_not_none(request, "request cannot be null")
    builder_cls = _RESPONSE_BUILDERS.get(getattr(request, "kind", None))
    if builder_cls is None:
        raise InvalidArgumentError("Malformed request or uri")

    check_has_scheme(uri, "Malformed request or uri")
    params = get_query_parameters(uri)

    if PARAM_ERROR in params:
        error = OAuthError.from_query_parameters(params)
        logger.log_error(
            "OAUTH_REDIRECT_ERROR",
            error.error,
            {"kind": request.kind.value, "error_description": error.error_description}
        )
        raise OAuthRedirectError(error)

    response = builder_cls(request).from_uri(uri).build()

    if response.get_state() != request.get_state():
        logger.log_error(
            "STATE_MISMATCH",
            "Response state does not match request state",
            {"kind": request.kind.value}
        )
        raise InvalidArgumentError("State returned in the redirect does not match the request")

    logger.log_oauth_message(
        "BROWSER", ComponentType.DISPATCHER.value,
        MessageType.DISPATCH.value,
        {"direction": "response", "kind": request.kind.value}
    )
    return response


def response_from(intent: IntentData) -> AuthorizationManagementResponse:
    """
    Extract a response from an intent-like carrier produced by
    ``AuthorizationResponse.to_intent`` or ``EndSessionResponse.to_intent``.

    Raises:
        InvalidArgumentError: If the carrier holds neither response
        MalformedJsonError: If the embedded response is malformed
    """
    check_not_none(intent, "dataIntent cannot be null")

    for kind, contains, extract in _RESPONSE_MARKERS:
        if contains(intent):
            logger.log_oauth_message(
                "HOST-APP", ComponentType.DISPATCHER.value,
                MessageType.DISPATCH.value,
                {"direction": "intent", "kind": kind.value}
            )
            return extract(intent)

    logger.log_error("MALFORMED_INTENT", "Intent carries no known response", {"extras": list(intent.keys())})
    raise InvalidArgumentError("Malformed intent")
