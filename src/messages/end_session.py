"""
OpenID Connect RP-initiated logout (end session) request and response.

See "OpenID Connect RP-Initiated Logout 1.0", section 2.
"""

from typing import Any, ClassVar, Dict, Mapping, Optional

from pydantic import Field

from ..shared import json_util
from ..shared.additional_params import check_additional_params
from ..shared.config import INTENT_EXTRAS
from ..shared.crypto_utils import PKCEGenerator
from ..shared.exceptions import InvalidArgumentError
from ..shared.oauth_models import ManagementKind, MessageModel
from ..shared.preconditions import check_has_scheme, check_not_empty, check_not_none
from ..shared.uri_util import append_query_parameters, get_query_parameters
from .service_configuration import AuthorizationServiceConfiguration

PARAM_ID_TOKEN_HINT = "id_token_hint"
PARAM_POST_LOGOUT_REDIRECT_URI = "post_logout_redirect_uri"
PARAM_STATE = "state"
PARAM_UI_LOCALES = "ui_locales"

BUILT_IN_PARAMS = frozenset({
    PARAM_ID_TOKEN_HINT,
    PARAM_POST_LOGOUT_REDIRECT_URI,
    PARAM_STATE,
    PARAM_UI_LOCALES,
})

KEY_CONFIGURATION = "configuration"
KEY_ID_TOKEN_HINT = "id_token_hint"
KEY_POST_LOGOUT_REDIRECT_URI = "post_logout_redirect_uri"
KEY_STATE = "state"
KEY_UI_LOCALES = "ui_locales"
KEY_ADDITIONAL_PARAMETERS = "additionalParameters"
KEY_REQUEST = "request"

# Present in every serialized request other than end session requests
KEY_CLIENT_ID = "clientId"

EXTRA_RESPONSE = INTENT_EXTRAS["end_session_response"]


class EndSessionRequest(MessageModel):
    """An OpenID Connect end session request."""
    kind: ClassVar[ManagementKind] = ManagementKind.END_SESSION

    configuration: AuthorizationServiceConfiguration
    id_token_hint: Optional[str] = None
    post_logout_redirect_uri: Optional[str] = None
    state: Optional[str] = None
    ui_locales: Optional[str] = None
    additional_parameters: Mapping[str, str] = Field(default_factory=dict)

    def get_state(self) -> Optional[str]:
        return self.state

    def to_uri(self) -> str:
        """
        Render the end session endpoint URL for this request.

        Raises:
            InvalidArgumentError: If the configuration has no end session endpoint
        """
        endpoint = check_not_none(
            self.configuration.end_session_endpoint,
            "configuration does not define an end session endpoint"
        )

        params: Dict[str, str] = {}
        json_util.put_if_not_null(params, PARAM_ID_TOKEN_HINT, self.id_token_hint)
        json_util.put_if_not_null(params, PARAM_POST_LOGOUT_REDIRECT_URI, self.post_logout_redirect_uri)
        json_util.put_if_not_null(params, PARAM_STATE, self.state)
        json_util.put_if_not_null(params, PARAM_UI_LOCALES, self.ui_locales)
        params.update(self.additional_parameters)

        return append_query_parameters(endpoint, params)

    def json_serialize(self) -> Dict[str, Any]:
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_CONFIGURATION, self.configuration.to_json())
        json_util.put_if_not_null(json_obj, KEY_ID_TOKEN_HINT, self.id_token_hint)
        json_util.put_if_not_null(json_obj, KEY_POST_LOGOUT_REDIRECT_URI, self.post_logout_redirect_uri)
        json_util.put_if_not_null(json_obj, KEY_STATE, self.state)
        json_util.put_if_not_null(json_obj, KEY_UI_LOCALES, self.ui_locales)
        json_util.put(json_obj, KEY_ADDITIONAL_PARAMETERS,
                      json_util.map_to_json_object(self.additional_parameters))
        return json_obj

    def json_serialize_string(self) -> str:
        return json_util.to_json_string(self.json_serialize())

    @staticmethod
    def is_end_session_request(json_obj: Mapping[str, Any]) -> bool:
        """End session requests carry a configuration but no client ID."""
        return KEY_CONFIGURATION in json_obj and KEY_CLIENT_ID not in json_obj

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any]) -> "EndSessionRequest":
        """
        Read a request from the JSON object produced by :meth:`json_serialize`.

        Raises:
            MalformedJsonError: If the configuration is missing or a field is malformed
        """
        check_not_none(json_obj, "json cannot be None")
        configuration = AuthorizationServiceConfiguration.from_json(
            json_util.get_json_object(json_obj, KEY_CONFIGURATION)
        )
        return (
            cls.Builder(configuration)
            .set_id_token_hint(json_util.get_string_if_defined(json_obj, KEY_ID_TOKEN_HINT))
            .set_post_logout_redirect_uri(
                json_util.get_uri_if_defined(json_obj, KEY_POST_LOGOUT_REDIRECT_URI))
            .set_state(json_util.get_string_if_defined(json_obj, KEY_STATE))
            .set_ui_locales(json_util.get_string_if_defined(json_obj, KEY_UI_LOCALES))
            .set_additional_parameters(json_util.get_string_map(json_obj, KEY_ADDITIONAL_PARAMETERS))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str) -> "EndSessionRequest":
        check_not_none(json_str, "json string cannot be None")
        return cls.json_deserialize(json_util.parse_json_object(json_str))

    class Builder:
        """Creates instances of :class:`EndSessionRequest`."""

        def __init__(self, configuration: AuthorizationServiceConfiguration):
            self.set_configuration(configuration)
            self._id_token_hint: Optional[str] = None
            self._post_logout_redirect_uri: Optional[str] = None
            self._ui_locales: Optional[str] = None
            self.set_state(PKCEGenerator.generate_state_parameter())
            self._additional_parameters = check_additional_params(None, BUILT_IN_PARAMS)

        def set_configuration(self, configuration: AuthorizationServiceConfiguration):
            self._configuration = check_not_none(configuration, "configuration cannot be null")
            return self

        def set_id_token_hint(self, id_token_hint: Optional[str]):
            if id_token_hint is not None:
                check_not_empty(id_token_hint, "idTokenHint must not be empty")
            self._id_token_hint = id_token_hint
            return self

        def set_post_logout_redirect_uri(self, post_logout_redirect_uri: Optional[str]):
            if post_logout_redirect_uri is not None:
                check_has_scheme(post_logout_redirect_uri,
                                 "postLogoutRedirectUri must have a scheme")
            self._post_logout_redirect_uri = post_logout_redirect_uri
            return self

        def set_state(self, state: Optional[str]):
            if state is not None:
                check_not_empty(state, "state must not be empty")
            self._state = state
            return self

        def set_ui_locales(self, ui_locales: Optional[str]):
            self._ui_locales = ui_locales or None
            return self

        def set_additional_parameters(self, additional_parameters: Optional[Mapping[str, str]]):
            self._additional_parameters = check_additional_params(
                additional_parameters, BUILT_IN_PARAMS
            )
            return self

        def build(self) -> "EndSessionRequest":
            return EndSessionRequest(
                configuration=self._configuration,
                id_token_hint=self._id_token_hint,
                post_logout_redirect_uri=self._post_logout_redirect_uri,
                state=self._state,
                ui_locales=self._ui_locales,
                additional_parameters=self._additional_parameters,
            )


class EndSessionResponse(MessageModel):
    """A response to an end session request, read from the redirect URI."""
    kind: ClassVar[ManagementKind] = ManagementKind.END_SESSION

    request: EndSessionRequest
    state: Optional[str] = None

    def get_state(self) -> Optional[str]:
        return self.state

    def json_serialize(self) -> Dict[str, Any]:
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_REQUEST, self.request.json_serialize())
        json_util.put_if_not_null(json_obj, KEY_STATE, self.state)
        return json_obj

    def json_serialize_string(self) -> str:
        return json_util.to_json_string(self.json_serialize())

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any]) -> "EndSessionResponse":
        """
        Read a response from the JSON object produced by :meth:`json_serialize`.

        Raises:
            InvalidArgumentError: If the serialized request is not embedded
        """
        check_not_none(json_obj, "json cannot be None")
        if KEY_REQUEST not in json_obj:
            raise InvalidArgumentError(
                "end session request not provided and not found in JSON"
            )

        return (
            cls.Builder(EndSessionRequest.json_deserialize(
                json_util.get_json_object(json_obj, KEY_REQUEST)))
            .set_state(json_util.get_string_if_defined(json_obj, KEY_STATE))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str) -> "EndSessionResponse":
        check_not_none(json_str, "json string cannot be None")
        return cls.json_deserialize(json_util.parse_json_object(json_str))

    def to_intent(self) -> Dict[str, str]:
        """Produce the data carrier handed back to the host application."""
        return {EXTRA_RESPONSE: self.json_serialize_string()}

    @staticmethod
    def contains_end_session_response(intent: Mapping[str, str]) -> bool:
        return EXTRA_RESPONSE in intent

    @classmethod
    def from_intent(cls, intent: Mapping[str, str]) -> "EndSessionResponse":
        """
        Extract a response from a carrier produced by :meth:`to_intent`.

        Raises:
            InvalidArgumentError: If the carrier holds no end session response
        """
        check_not_none(intent, "dataIntent must not be null")
        if not cls.contains_end_session_response(intent):
            raise InvalidArgumentError("intent does not contain an end session response")
        return cls.json_deserialize_string(intent[EXTRA_RESPONSE])

    class Builder:
        """Creates instances of :class:`EndSessionResponse`."""

        def __init__(self, request: EndSessionRequest):
            self.set_request(request)
            self._state: Optional[str] = None

        def from_uri(self, uri: str):
            """Extract the state from the redirect URI's query parameters."""
            self.set_state(get_query_parameters(uri).get(PARAM_STATE))
            return self

        def set_request(self, request: EndSessionRequest):
            self._request = check_not_none(request, "request cannot be null")
            return self

        def set_state(self, state: Optional[str]):
            if state is not None:
                check_not_empty(state, "state must not be empty")
            self._state = state
            return self

        def build(self) -> "EndSessionResponse":
            return EndSessionResponse(request=self._request, state=self._state)
