"""
OAuth 2.0 authorization request and response models.

The request is rendered into the authorization endpoint URL opened in the
browser; the response is read back from the redirect URI the browser is
sent to. PKCE (RFC 7636) is applied by default.
"""

import time
from typing import Any, Callable, ClassVar, Dict, Iterable, Mapping, Optional

from pydantic import Field

from ..shared import json_util
from ..shared.additional_params import (
    check_additional_params,
    extract_additional_params_from_query,
)
from ..shared.config import INTENT_EXTRAS
from ..shared.crypto_utils import PKCEGenerator, check_code_verifier
from ..shared.exceptions import InvalidArgumentError
from ..shared.logging_utils import ComponentType, MessageType, create_logger
from ..shared.oauth_models import ManagementKind, MessageModel, PKCEMethod
from ..shared.preconditions import check_argument, check_has_scheme, check_not_empty, check_not_none
from ..shared.uri_util import append_query_parameters, get_query_parameters
from .service_configuration import AuthorizationServiceConfiguration

PARAM_CLIENT_ID = "client_id"
PARAM_CODE_CHALLENGE = "code_challenge"
PARAM_CODE_CHALLENGE_METHOD = "code_challenge_method"
PARAM_DISPLAY = "display"
PARAM_LOGIN_HINT = "login_hint"
PARAM_PROMPT = "prompt"
PARAM_REDIRECT_URI = "redirect_uri"
PARAM_RESPONSE_MODE = "response_mode"
PARAM_RESPONSE_TYPE = "response_type"
PARAM_SCOPE = "scope"
PARAM_STATE = "state"
PARAM_NONCE = "nonce"

REQUEST_BUILT_IN_PARAMS = frozenset({
    PARAM_CLIENT_ID,
    PARAM_CODE_CHALLENGE,
    PARAM_CODE_CHALLENGE_METHOD,
    PARAM_DISPLAY,
    PARAM_LOGIN_HINT,
    PARAM_PROMPT,
    PARAM_REDIRECT_URI,
    PARAM_RESPONSE_MODE,
    PARAM_RESPONSE_TYPE,
    PARAM_SCOPE,
    PARAM_STATE,
    PARAM_NONCE,
})

KEY_CONFIGURATION = "configuration"
KEY_CLIENT_ID = "clientId"
KEY_RESPONSE_TYPE = "responseType"
KEY_REDIRECT_URI = "redirectUri"
KEY_SCOPE = "scope"
KEY_STATE = "state"
KEY_NONCE = "nonce"
KEY_LOGIN_HINT = "loginHint"
KEY_PROMPT = "prompt"
KEY_CODE_VERIFIER = "codeVerifier"
KEY_CODE_VERIFIER_CHALLENGE = "codeVerifierChallenge"
KEY_CODE_VERIFIER_CHALLENGE_METHOD = "codeVerifierChallengeMethod"
KEY_RESPONSE_MODE = "responseMode"
KEY_ADDITIONAL_PARAMETERS = "additionalParameters"

# Response parameters, also used as the response's JSON keys
RESPONSE_KEY_REQUEST = "request"
RESPONSE_KEY_STATE = "state"
RESPONSE_KEY_TOKEN_TYPE = "token_type"
RESPONSE_KEY_AUTHORIZATION_CODE = "code"
RESPONSE_KEY_ACCESS_TOKEN = "access_token"
RESPONSE_KEY_EXPIRES_AT = "expires_at"
RESPONSE_KEY_EXPIRES_IN = "expires_in"
RESPONSE_KEY_ID_TOKEN = "id_token"
RESPONSE_KEY_SCOPE = "scope"
RESPONSE_KEY_ADDITIONAL_PARAMETERS = "additional_parameters"

RESPONSE_BUILT_IN_PARAMS = frozenset({
    RESPONSE_KEY_TOKEN_TYPE,
    RESPONSE_KEY_STATE,
    RESPONSE_KEY_AUTHORIZATION_CODE,
    RESPONSE_KEY_ACCESS_TOKEN,
    RESPONSE_KEY_EXPIRES_IN,
    RESPONSE_KEY_ID_TOKEN,
    RESPONSE_KEY_SCOPE,
})

EXTRA_RESPONSE = INTENT_EXTRAS["authorization_response"]

logger = create_logger(ComponentType.AUTHORIZATION.value)


def _now_ms() -> int:
    return int(time.time() * 1000)


class AuthorizationRequest(MessageModel):
    """
    An OAuth 2.0 authorization request.

    Created through :class:`AuthorizationRequest.Builder`, which generates a
    state, a nonce and a PKCE code verifier unless told otherwise.
    """
    kind: ClassVar[ManagementKind] = ManagementKind.AUTHORIZATION

    configuration: AuthorizationServiceConfiguration
    client_id: str = Field(..., min_length=1)
    response_type: str = Field(..., min_length=1)
    redirect_uri: str
    scope: Optional[str] = None
    state: Optional[str] = None
    nonce: Optional[str] = None
    login_hint: Optional[str] = None
    prompt: Optional[str] = None
    code_verifier: Optional[str] = None
    code_verifier_challenge: Optional[str] = None
    code_verifier_challenge_method: Optional[str] = None
    response_mode: Optional[str] = None
    additional_parameters: Mapping[str, str] = Field(default_factory=dict)

    def get_state(self) -> Optional[str]:
        return self.state

    def to_uri(self) -> str:
        """Render the authorization endpoint URL for this request."""
        params: Dict[str, str] = {}
        json_util.put(params, PARAM_REDIRECT_URI, self.redirect_uri)
        json_util.put(params, PARAM_CLIENT_ID, self.client_id)
        json_util.put(params, PARAM_RESPONSE_TYPE, self.response_type)
        json_util.put_if_not_null(params, PARAM_STATE, self.state)
        json_util.put_if_not_null(params, PARAM_NONCE, self.nonce)
        json_util.put_if_not_null(params, PARAM_LOGIN_HINT, self.login_hint)
        json_util.put_if_not_null(params, PARAM_PROMPT, self.prompt)
        json_util.put_if_not_null(params, PARAM_SCOPE, self.scope)
        json_util.put_if_not_null(params, PARAM_RESPONSE_MODE, self.response_mode)

        if self.code_verifier is not None:
            json_util.put(params, PARAM_CODE_CHALLENGE, self.code_verifier_challenge)
            json_util.put(params, PARAM_CODE_CHALLENGE_METHOD, self.code_verifier_challenge_method)

        params.update(self.additional_parameters)

        return append_query_parameters(self.configuration.authorization_endpoint, params)

    def json_serialize(self) -> Dict[str, Any]:
        """Produce a JSON object representation of the request."""
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_CONFIGURATION, self.configuration.to_json())
        json_util.put(json_obj, KEY_CLIENT_ID, self.client_id)
        json_util.put(json_obj, KEY_RESPONSE_TYPE, self.response_type)
        json_util.put(json_obj, KEY_REDIRECT_URI, self.redirect_uri)
        json_util.put_if_not_null(json_obj, KEY_SCOPE, self.scope)
        json_util.put_if_not_null(json_obj, KEY_STATE, self.state)
        json_util.put_if_not_null(json_obj, KEY_NONCE, self.nonce)
        json_util.put_if_not_null(json_obj, KEY_LOGIN_HINT, self.login_hint)
        json_util.put_if_not_null(json_obj, KEY_PROMPT, self.prompt)
        json_util.put_if_not_null(json_obj, KEY_CODE_VERIFIER, self.code_verifier)
        json_util.put_if_not_null(json_obj, KEY_CODE_VERIFIER_CHALLENGE, self.code_verifier_challenge)
        json_util.put_if_not_null(json_obj, KEY_CODE_VERIFIER_CHALLENGE_METHOD,
                                  self.code_verifier_challenge_method)
        json_util.put_if_not_null(json_obj, KEY_RESPONSE_MODE, self.response_mode)
        json_util.put(json_obj, KEY_ADDITIONAL_PARAMETERS,
                      json_util.map_to_json_object(self.additional_parameters))
        return json_obj

    def json_serialize_string(self) -> str:
        return json_util.to_json_string(self.json_serialize())

    @staticmethod
    def is_authorization_request(json_obj: Mapping[str, Any]) -> bool:
        """Authorization requests are the only requests carrying a response type."""
        return KEY_REDIRECT_URI in json_obj and KEY_RESPONSE_TYPE in json_obj

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any]) -> "AuthorizationRequest":
        """
        Read a request from the JSON object produced by :meth:`json_serialize`.

        Raises:
            MalformedJsonError: If a required field is missing or malformed
        """
        check_not_none(json_obj, "json cannot be None")

        configuration = AuthorizationServiceConfiguration.from_json(
            json_util.get_json_object(json_obj, KEY_CONFIGURATION)
        )

        return (
            cls.Builder(
                configuration,
                json_util.get_string(json_obj, KEY_CLIENT_ID),
                json_util.get_string(json_obj, KEY_RESPONSE_TYPE),
                json_util.get_uri(json_obj, KEY_REDIRECT_URI),
            )
            .set_scope(json_util.get_string_if_defined(json_obj, KEY_SCOPE))
            .set_state(json_util.get_string_if_defined(json_obj, KEY_STATE))
            .set_nonce(json_util.get_string_if_defined(json_obj, KEY_NONCE))
            .set_login_hint(json_util.get_string_if_defined(json_obj, KEY_LOGIN_HINT))
            .set_prompt(json_util.get_string_if_defined(json_obj, KEY_PROMPT))
            .set_code_verifier(
                json_util.get_string_if_defined(json_obj, KEY_CODE_VERIFIER),
                json_util.get_string_if_defined(json_obj, KEY_CODE_VERIFIER_CHALLENGE),
                json_util.get_string_if_defined(json_obj, KEY_CODE_VERIFIER_CHALLENGE_METHOD),
            )
            .set_response_mode(json_util.get_string_if_defined(json_obj, KEY_RESPONSE_MODE))
            .set_additional_parameters(json_util.get_string_map(json_obj, KEY_ADDITIONAL_PARAMETERS))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str) -> "AuthorizationRequest":
        check_not_none(json_str, "json string cannot be None")
        return cls.json_deserialize(json_util.parse_json_object(json_str))

    class Builder:
        """Creates instances of :class:`AuthorizationRequest`."""

        def __init__(self,
                     configuration: AuthorizationServiceConfiguration,
                     client_id: str,
                     response_type: str,
                     redirect_uri: str):
            self.set_configuration(configuration)
            self.set_client_id(client_id)
            self.set_response_type(response_type)
            self.set_redirect_uri(redirect_uri)
            self._scope: Optional[str] = None
            self._login_hint: Optional[str] = None
            self._prompt: Optional[str] = None
            self._response_mode: Optional[str] = None
            self.set_state(PKCEGenerator.generate_state_parameter())
            self.set_nonce(PKCEGenerator.generate_nonce())
            self.set_code_verifier(PKCEGenerator.generate_code_verifier())
            self._additional_parameters = check_additional_params(None, REQUEST_BUILT_IN_PARAMS)

        def set_configuration(self, configuration: AuthorizationServiceConfiguration):
            self._configuration = check_not_none(configuration, "configuration cannot be None")
            return self

        def set_client_id(self, client_id: str):
            self._client_id = check_not_empty(client_id, "client ID cannot be null or empty")
            return self

        def set_response_type(self, response_type: str):
            self._response_type = check_not_empty(
                response_type, "expected response type cannot be null or empty"
            )
            return self

        def set_redirect_uri(self, redirect_uri: str):
            check_not_none(redirect_uri, "redirect URI cannot be null")
            self._redirect_uri = check_has_scheme(redirect_uri, "redirect URI must have a scheme")
            return self

        def set_scope(self, scope: Optional[str]):
            """Specify the space-delimited scope; an empty value clears it."""
            if not scope:
                self._scope = None
            else:
                self.set_scopes(scope.split(" "))
            return self

        def set_scopes(self, scopes: Optional[Iterable[str]]):
            """Specify the scope as individual values, joined with spaces."""
            values = [value for value in (scopes or []) if value]
            self._scope = " ".join(values) if values else None
            return self

        def set_state(self, state: Optional[str]):
            """Specify the state; if given it must not be empty."""
            if state is not None:
                check_not_empty(state, "state cannot be empty if defined")
            self._state = state
            return self

        def set_nonce(self, nonce: Optional[str]):
            """Specify the OpenID Connect nonce; if given it must not be empty."""
            if nonce is not None:
                check_not_empty(nonce, "nonce cannot be empty if defined")
            self._nonce = nonce
            return self

        def set_login_hint(self, login_hint: Optional[str]):
            if login_hint is not None:
                check_not_empty(login_hint, "login hint must be null or not empty")
            self._login_hint = login_hint
            return self

        def set_prompt(self, prompt: Optional[str]):
            if prompt is not None:
                check_not_empty(prompt, "prompt must be null or non-empty")
            self._prompt = prompt
            return self

        def set_code_verifier(self,
                              code_verifier: Optional[str],
                              code_verifier_challenge: Optional[str] = None,
                              code_verifier_challenge_method: Optional[str] = None):
            """
            Specify the PKCE code verifier and, optionally, its challenge.

            When only the verifier is given, the S256 challenge is derived from
            it. Passing None disables PKCE for this request.

            Raises:
                CodeVerifierFormatError: If the verifier violates RFC 7636
                InvalidArgumentError: If challenge values are given without a
                    verifier, or a challenge is given without its method
            """
            if code_verifier is not None:
                check_code_verifier(code_verifier)
                if code_verifier_challenge is None:
                    code_verifier_challenge = PKCEGenerator.derive_code_verifier_challenge(code_verifier)
                    code_verifier_challenge_method = PKCEMethod.S256.value
                else:
                    check_not_empty(
                        code_verifier_challenge_method,
                        "code verifier challenge method must be specified with the challenge"
                    )
            else:
                check_argument(
                    code_verifier_challenge is None,
                    "code verifier challenge must be null if verifier is null"
                )
                check_argument(
                    code_verifier_challenge_method is None,
                    "code verifier challenge method must be null if verifier is null"
                )

            self._code_verifier = code_verifier
            self._code_verifier_challenge = code_verifier_challenge
            self._code_verifier_challenge_method = code_verifier_challenge_method
            return self

        def set_response_mode(self, response_mode: Optional[str]):
            if response_mode is not None:
                check_not_empty(response_mode, "responseMode must not be empty")
            self._response_mode = response_mode
            return self

        def set_additional_parameters(self, additional_parameters: Optional[Mapping[str, str]]):
            self._additional_parameters = check_additional_params(
                additional_parameters, REQUEST_BUILT_IN_PARAMS
            )
            return self

        def build(self) -> "AuthorizationRequest":
            if self._code_verifier is not None:
                logger.log_pkce_operation("generation", {
                    "code_verifier": self._code_verifier,
                    "code_challenge": self._code_verifier_challenge,
                    "method": self._code_verifier_challenge_method,
                })

            return AuthorizationRequest(
                configuration=self._configuration,
                client_id=self._client_id,
                response_type=self._response_type,
                redirect_uri=self._redirect_uri,
                scope=self._scope,
                state=self._state,
                nonce=self._nonce,
                login_hint=self._login_hint,
                prompt=self._prompt,
                code_verifier=self._code_verifier,
                code_verifier_challenge=self._code_verifier_challenge,
                code_verifier_challenge_method=self._code_verifier_challenge_method,
                response_mode=self._response_mode,
                additional_parameters=self._additional_parameters,
            )


class AuthorizationResponse(MessageModel):
    """
    A response to an authorization request, read from the redirect URI.

    ``access_token_expiration_time`` is in milliseconds since the epoch.
    """
    kind: ClassVar[ManagementKind] = ManagementKind.AUTHORIZATION

    request: AuthorizationRequest
    state: Optional[str] = None
    token_type: Optional[str] = None
    authorization_code: Optional[str] = None
    access_token: Optional[str] = None
    access_token_expiration_time: Optional[int] = None
    id_token: Optional[str] = None
    scope: Optional[str] = None
    additional_parameters: Mapping[str, str] = Field(default_factory=dict)

    def get_state(self) -> Optional[str]:
        return self.state

    def json_serialize(self) -> Dict[str, Any]:
        """Produce a JSON object representation embedding the request."""
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, RESPONSE_KEY_REQUEST, self.request.json_serialize())
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_STATE, self.state)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_TOKEN_TYPE, self.token_type)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_AUTHORIZATION_CODE, self.authorization_code)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_ACCESS_TOKEN, self.access_token)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_EXPIRES_AT, self.access_token_expiration_time)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_ID_TOKEN, self.id_token)
        json_util.put_if_not_null(json_obj, RESPONSE_KEY_SCOPE, self.scope)
        json_util.put(json_obj, RESPONSE_KEY_ADDITIONAL_PARAMETERS,
                      json_util.map_to_json_object(self.additional_parameters))
        return json_obj

    def json_serialize_string(self) -> str:
        return json_util.to_json_string(self.json_serialize())

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any]) -> "AuthorizationResponse":
        """
        Read a response from the JSON object produced by :meth:`json_serialize`.

        Raises:
            InvalidArgumentError: If the serialized request is not embedded
            MalformedJsonError: If a field is malformed
        """
        check_not_none(json_obj, "json cannot be None")
        if RESPONSE_KEY_REQUEST not in json_obj:
            raise InvalidArgumentError(
                "authorization request not provided and not found in JSON"
            )

        request = AuthorizationRequest.json_deserialize(
            json_util.get_json_object(json_obj, RESPONSE_KEY_REQUEST)
        )
        return (
            cls.Builder(request)
            .set_state(json_util.get_string_if_defined(json_obj, RESPONSE_KEY_STATE))
            .set_token_type(json_util.get_string_if_defined(json_obj, RESPONSE_KEY_TOKEN_TYPE))
            .set_authorization_code(
                json_util.get_string_if_defined(json_obj, RESPONSE_KEY_AUTHORIZATION_CODE))
            .set_access_token(json_util.get_string_if_defined(json_obj, RESPONSE_KEY_ACCESS_TOKEN))
            .set_access_token_expiration_time(
                json_util.get_long_if_defined(json_obj, RESPONSE_KEY_EXPIRES_AT))
            .set_id_token(json_util.get_string_if_defined(json_obj, RESPONSE_KEY_ID_TOKEN))
            .set_scope(json_util.get_string_if_defined(json_obj, RESPONSE_KEY_SCOPE))
            .set_additional_parameters(
                json_util.get_string_map(json_obj, RESPONSE_KEY_ADDITIONAL_PARAMETERS))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str) -> "AuthorizationResponse":
        check_not_none(json_str, "json string cannot be None")
        return cls.json_deserialize(json_util.parse_json_object(json_str))

    def to_intent(self) -> Dict[str, str]:
        """Produce the data carrier handed back to the host application."""
        return {EXTRA_RESPONSE: self.json_serialize_string()}

    @staticmethod
    def contains_authorization_response(intent: Mapping[str, str]) -> bool:
        return EXTRA_RESPONSE in intent

    @classmethod
    def from_intent(cls, intent: Mapping[str, str]) -> "AuthorizationResponse":
        """
        Extract a response from a carrier produced by :meth:`to_intent`.

        Raises:
            InvalidArgumentError: If the carrier holds no authorization response
            MalformedJsonError: If the embedded response is malformed
        """
        check_not_none(intent, "intent cannot be None")
        if not cls.contains_authorization_response(intent):
            raise InvalidArgumentError("intent does not contain an authorization response")
        return cls.json_deserialize_string(intent[EXTRA_RESPONSE])

    class Builder:
        """Creates instances of :class:`AuthorizationResponse`."""

        def __init__(self, request: AuthorizationRequest):
            self.set_request(request)
            self._state: Optional[str] = None
            self._token_type: Optional[str] = None
            self._authorization_code: Optional[str] = None
            self._access_token: Optional[str] = None
            self._access_token_expiration_time: Optional[int] = None
            self._id_token: Optional[str] = None
            self._scope: Optional[str] = None
            self._additional_parameters = check_additional_params(None, RESPONSE_BUILT_IN_PARAMS)

        def from_uri(self, uri: str, now_ms: Callable[[], int] = _now_ms):
            """
            Extract response fields from the redirect URI's query parameters.

            Args:
                uri: Redirect URI received from the interactive flow
                now_ms: Clock used to turn ``expires_in`` into an expiration time

            Raises:
                InvalidArgumentError: If ``expires_in`` is not an integer, or a
                    protocol parameter is present but empty
            """
            params = get_query_parameters(uri)
            logger.log_oauth_message(
                "BROWSER", ComponentType.AUTHORIZATION.value,
                MessageType.REDIRECT.value,
                params
            )

            self.set_state(params.get(RESPONSE_KEY_STATE))
            self.set_token_type(params.get(RESPONSE_KEY_TOKEN_TYPE))
            self.set_authorization_code(params.get(RESPONSE_KEY_AUTHORIZATION_CODE))
            self.set_access_token(params.get(RESPONSE_KEY_ACCESS_TOKEN))

            expires_in = params.get(RESPONSE_KEY_EXPIRES_IN)
            if expires_in is not None:
                try:
                    expires_in_seconds = int(expires_in)
                except ValueError:
                    raise InvalidArgumentError(
                        f"expires_in must be an integer, got {expires_in!r}"
                    ) from None
                self.set_access_token_expires_in(expires_in_seconds, now_ms)
            else:
                self.set_access_token_expiration_time(None)

            self.set_id_token(params.get(RESPONSE_KEY_ID_TOKEN))
            self.set_scope(params.get(RESPONSE_KEY_SCOPE))
            self.set_additional_parameters(
                extract_additional_params_from_query(params, RESPONSE_BUILT_IN_PARAMS)
            )
            return self

        def set_request(self, request: AuthorizationRequest):
            self._request = check_not_none(request, "authorization request cannot be null")
            return self

        def set_state(self, state: Optional[str]):
            if state is not None:
                check_not_empty(state, "state must not be empty")
            self._state = state
            return self

        def set_token_type(self, token_type: Optional[str]):
            if token_type is not None:
                check_not_empty(token_type, "tokenType must not be empty")
            self._token_type = token_type
            return self

        def set_authorization_code(self, authorization_code: Optional[str]):
            if authorization_code is not None:
                check_not_empty(authorization_code, "authorizationCode must not be empty")
            self._authorization_code = authorization_code
            return self

        def set_access_token(self, access_token: Optional[str]):
            if access_token is not None:
                check_not_empty(access_token, "accessToken must not be empty")
            self._access_token = access_token
            return self

        def set_access_token_expires_in(self, expires_in: Optional[int],
                                        now_ms: Callable[[], int] = _now_ms):
            """Set the expiration time relative to the clock, in seconds."""
            if expires_in is None:
                self._access_token_expiration_time = None
            else:
                self._access_token_expiration_time = now_ms() + expires_in * 1000
            return self

        def set_access_token_expiration_time(self, expiration_time: Optional[int]):
            self._access_token_expiration_time = expiration_time
            return self

        def set_id_token(self, id_token: Optional[str]):
            if id_token is not None:
                check_not_empty(id_token, "idToken cannot be empty")
            self._id_token = id_token
            return self

        def set_scope(self, scope: Optional[str]):
            self._scope = scope or None
            return self

        def set_additional_parameters(self, additional_parameters: Optional[Mapping[str, str]]):
            self._additional_parameters = check_additional_params(
                additional_parameters, RESPONSE_BUILT_IN_PARAMS
            )
            return self

        def build(self) -> "AuthorizationResponse":
            return AuthorizationResponse(
                request=self._request,
                state=self._state,
                token_type=self._token_type,
                authorization_code=self._authorization_code,
                access_token=self._access_token,
                access_token_expiration_time=self._access_token_expiration_time,
                id_token=self._id_token,
                scope=self._scope,
                additional_parameters=self._additional_parameters,
            )
