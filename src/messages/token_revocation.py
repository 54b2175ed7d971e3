"""
OAuth 2.0 token revocation request and response models.

See "The OAuth 2.0 Token Revocation (RFC 7009)", sections 2.1 and 2.2.
Both messages are immutable once built and round-trip through JSON for
persistent storage or hand-off between components of the host application.
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import Field

from ..shared import json_util
from ..shared.additional_params import check_additional_params, extract_additional_params
from ..shared.crypto_utils import check_code_verifier
from ..shared.exceptions import InvalidArgumentError
from ..shared.logging_utils import ComponentType, MessageType, create_logger
from ..shared.oauth_models import MessageModel
from ..shared.preconditions import check_has_scheme, check_not_empty, check_not_none
from .service_configuration import AuthorizationServiceConfiguration

PARAM_CLIENT_ID = "client_id"
PARAM_REDIRECT_URI = "redirect_uri"
PARAM_TOKEN = "token"
PARAM_CODE_VERIFIER = "code_verifier"

KEY_CONFIGURATION = "configuration"
KEY_CLIENT_ID = "clientId"
KEY_REDIRECT_URI = "redirectUri"
KEY_TOKEN = "token"
KEY_ADDITIONAL_PARAMETERS = "additionalParameters"
KEY_REQUEST = "request"

REQUEST_BUILT_IN_PARAMS = frozenset({
    PARAM_CLIENT_ID,
    PARAM_REDIRECT_URI,
    PARAM_TOKEN,
})

RESPONSE_BUILT_IN_PARAMS = frozenset({
    KEY_TOKEN,
})

logger = create_logger(ComponentType.REVOCATION.value)


class TokenRevocationRequest(MessageModel):
    """
    An OAuth 2.0 token revocation request.

    Created through :class:`TokenRevocationRequest.Builder`; the code
    verifier is sent to the server but never persisted by
    :meth:`json_serialize`.
    """
    configuration: AuthorizationServiceConfiguration = Field(
        ...,
        description="How to reach the OAuth provider"
    )
    client_id: str = Field(..., min_length=1, description="OAuth client identifier")
    redirect_uri: Optional[str] = Field(default=None, description="Client redirect URI")
    token: Optional[str] = Field(default=None, description="Token to revoke")
    code_verifier: Optional[str] = Field(default=None, description="PKCE code verifier")
    additional_parameters: Mapping[str, str] = Field(
        default_factory=dict,
        description="Additional parameters sent with the request"
    )

    def get_request_parameters(self) -> Dict[str, str]:
        """
        Produce the form parameters for the revocation call.

        Returns:
            Dict[str, str]: redirect_uri, token and code_verifier when set,
                followed by the additional parameters
        """
        params: Dict[str, str] = {}
        json_util.put_if_not_null(params, PARAM_REDIRECT_URI, self.redirect_uri)
        json_util.put_if_not_null(params, PARAM_TOKEN, self.token)
        json_util.put_if_not_null(params, PARAM_CODE_VERIFIER, self.code_verifier)

        for key, value in self.additional_parameters.items():
            params[key] = value

        return params

    def to_uri(self) -> str:
        """
        Return the revocation endpoint this request is sent to.

        Raises:
            InvalidArgumentError: If the configuration has no revocation endpoint
        """
        return check_not_none(
            self.configuration.revocation_endpoint,
            "configuration does not define a revocation endpoint"
        )

    def json_serialize(self) -> Dict[str, Any]:
        """
        Produce a JSON object representation of the request for persistent
        storage or local transmission.
        """
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_CONFIGURATION, self.configuration.to_json())
        json_util.put(json_obj, KEY_CLIENT_ID, self.client_id)
        json_util.put_if_not_null(json_obj, KEY_REDIRECT_URI, self.redirect_uri)
        json_util.put_if_not_null(json_obj, KEY_TOKEN, self.token)
        json_util.put(json_obj, KEY_ADDITIONAL_PARAMETERS,
                      json_util.map_to_json_object(self.additional_parameters))
        return json_obj

    def json_serialize_string(self) -> str:
        """Convenience wrapper for :meth:`json_serialize` returning text."""
        return json_util.to_json_string(self.json_serialize())

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any]) -> "TokenRevocationRequest":
        """
        Read a request from the JSON object produced by :meth:`json_serialize`.

        Raises:
            MalformedJsonError: If configuration or clientId is missing or malformed
        """
        check_not_none(json_obj, "json object cannot be None")

        logger.log_oauth_message(
            "STORAGE", ComponentType.REVOCATION.value,
            MessageType.DESERIALIZATION.value,
            {"keys": list(json_obj.keys())}
        )

        configuration = AuthorizationServiceConfiguration.from_json(
            json_util.get_json_object(json_obj, KEY_CONFIGURATION)
        )

        return (
            cls.Builder(configuration, json_util.get_string(json_obj, KEY_CLIENT_ID))
            .set_redirect_uri(json_util.get_uri_if_defined(json_obj, KEY_REDIRECT_URI))
            .set_token(json_util.get_string_if_defined(json_obj, KEY_TOKEN))
            .set_additional_parameters(json_util.get_string_map(json_obj, KEY_ADDITIONAL_PARAMETERS))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str) -> "TokenRevocationRequest":
        """Convenience wrapper for :meth:`json_deserialize` taking text."""
        check_not_none(json_str, "json string cannot be None")
        return cls.json_deserialize(json_util.parse_json_object(json_str))

    class Builder:
        """Creates instances of :class:`TokenRevocationRequest`."""

        def __init__(self, configuration: AuthorizationServiceConfiguration, client_id: str):
            self.set_configuration(configuration)
            self.set_client_id(client_id)
            self._redirect_uri: Optional[str] = None
            self._token: Optional[str] = None
            self._code_verifier: Optional[str] = None
            self._additional_parameters: Mapping[str, str] = check_additional_params(
                None, REQUEST_BUILT_IN_PARAMS
            )

        def set_configuration(self, configuration: AuthorizationServiceConfiguration) -> "TokenRevocationRequest.Builder":
            """Specify the service configuration, which must not be None."""
            self._configuration = check_not_none(configuration, "configuration cannot be None")
            return self

        def set_client_id(self, client_id: str) -> "TokenRevocationRequest.Builder":
            """Specify the client ID, which must not be None or empty."""
            self._client_id = check_not_empty(client_id, "clientId cannot be null or empty")
            return self

        def set_redirect_uri(self, redirect_uri: Optional[str]) -> "TokenRevocationRequest.Builder":
            """Specify the redirect URI; if given it must have a scheme."""
            if redirect_uri is not None:
                check_has_scheme(redirect_uri, "redirectUri must have a scheme")
            self._redirect_uri = redirect_uri
            return self

        def set_token(self, token: Optional[str]) -> "TokenRevocationRequest.Builder":
            """Specify the token to revoke; if given it must not be empty."""
            if token is not None:
                check_not_empty(token, "token cannot be empty if defined")
            self._token = token
            return self

        def set_code_verifier(self, code_verifier: Optional[str]) -> "TokenRevocationRequest.Builder":
            """
            Specify the PKCE code verifier used to produce the original
            authorization request's challenge.

            Raises:
                CodeVerifierFormatError: If the verifier violates RFC 7636
            """
            if code_verifier is not None:
                check_code_verifier(code_verifier)
            self._code_verifier = code_verifier
            return self

        def set_additional_parameters(self, additional_parameters: Optional[Mapping[str, str]]) -> "TokenRevocationRequest.Builder":
            """Specify additional parameters to be sent with the request."""
            self._additional_parameters = check_additional_params(
                additional_parameters, REQUEST_BUILT_IN_PARAMS
            )
            return self

        def build(self) -> "TokenRevocationRequest":
            """
            Produce the request.

            Raises:
                InvalidArgumentError: If an additional parameter would shadow
                    the code verifier in the request parameters
            """
            if self._code_verifier is not None and PARAM_CODE_VERIFIER in self._additional_parameters:
                raise InvalidArgumentError(
                    f"Parameter {PARAM_CODE_VERIFIER} is set directly and cannot also "
                    f"be used as an additional parameter"
                )

            return TokenRevocationRequest(
                configuration=self._configuration,
                client_id=self._client_id,
                redirect_uri=self._redirect_uri,
                token=self._token,
                code_verifier=self._code_verifier,
                additional_parameters=self._additional_parameters,
            )


class TokenRevocationResponse(MessageModel):
    """
    A response to a token revocation request.

    A successful RFC 7009 response carries no protocol fields, so anything the
    server returns is kept as additional parameters.
    """
    request: TokenRevocationRequest = Field(..., description="The originating request")
    additional_parameters: Mapping[str, str] = Field(
        default_factory=dict,
        description="Additional, non-standard response parameters"
    )

    def json_serialize(self) -> Dict[str, Any]:
        """
        Produce a JSON object representation of the response, embedding the
        serialized request.
        """
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_REQUEST, self.request.json_serialize())
        json_util.put(json_obj, KEY_ADDITIONAL_PARAMETERS,
                      json_util.map_to_json_object(self.additional_parameters))
        return json_obj

    def json_serialize_string(self) -> str:
        """Convenience wrapper for :meth:`json_serialize` returning text."""
        return json_util.to_json_string(self.json_serialize())

    @classmethod
    def json_deserialize(cls, json_obj: Dict[str, Any],
                         request: Optional[TokenRevocationRequest] = None) -> "TokenRevocationResponse":
        """
        Read a response from the JSON object produced by :meth:`json_serialize`.

        If ``request`` is given the response is associated with it; otherwise
        the serialized request must be embedded in the JSON.

        Raises:
            InvalidArgumentError: If no request is given and none is embedded
            MalformedJsonError: If the embedded request or parameters are malformed
        """
        check_not_none(json_obj, "json object cannot be None")

        if request is None:
            if KEY_REQUEST not in json_obj:
                raise InvalidArgumentError(
                    "token revocation request not provided and not found in JSON"
                )
            request = TokenRevocationRequest.json_deserialize(
                json_util.get_json_object(json_obj, KEY_REQUEST)
            )

        return (
            cls.Builder(request)
            .set_additional_parameters(json_util.get_string_map(json_obj, KEY_ADDITIONAL_PARAMETERS))
            .build()
        )

    @classmethod
    def json_deserialize_string(cls, json_str: str,
                                request: Optional[TokenRevocationRequest] = None) -> "TokenRevocationResponse":
        """Convenience wrapper for :meth:`json_deserialize` taking text."""
        check_not_empty(json_str, "jsonStr cannot be null or empty")
        return cls.json_deserialize(json_util.parse_json_object(json_str), request)

    class Builder:
        """Creates instances of :class:`TokenRevocationResponse`."""

        def __init__(self, request: TokenRevocationRequest):
            self.set_request(request)
            self._additional_parameters: Mapping[str, str] = check_additional_params(
                None, RESPONSE_BUILT_IN_PARAMS
            )

        def from_response_json_string(self, json_str: str) -> "TokenRevocationResponse.Builder":
            """
            Extract response fields from the revocation endpoint's JSON body.

            Raises:
                InvalidArgumentError: If the string is None or empty
                MalformedJsonError: If the body is not a JSON object
            """
            check_not_empty(json_str, "json cannot be null or empty")
            return self.from_response_json(json_util.parse_json_object(json_str))

        def from_response_json(self, json_obj: Dict[str, Any]) -> "TokenRevocationResponse.Builder":
            """Extract every non-reserved field of the body as an additional parameter."""
            logger.log_oauth_message(
                "AUTH-SERVER", ComponentType.REVOCATION.value,
                MessageType.RESPONSE.value,
                json_obj
            )
            self.set_additional_parameters(
                extract_additional_params(json_obj, RESPONSE_BUILT_IN_PARAMS)
            )
            return self

        def set_request(self, request: TokenRevocationRequest) -> "TokenRevocationResponse.Builder":
            """Specify the originating request, which must not be None."""
            self._request = check_not_none(request, "request cannot be null")
            return self

        def set_additional_parameters(self, additional_parameters: Optional[Mapping[str, str]]) -> "TokenRevocationResponse.Builder":
            """Specify additional, non-standard response parameters."""
            self._additional_parameters = check_additional_params(
                additional_parameters, RESPONSE_BUILT_IN_PARAMS
            )
            return self

        def build(self) -> "TokenRevocationResponse":
            """Produce the response."""
            return TokenRevocationResponse(
                request=self._request,
                additional_parameters=self._additional_parameters,
            )
