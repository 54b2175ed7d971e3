"""
Authorization service configuration.

Describes how to reach a particular OAuth provider: its authorization and
token endpoints plus the optional registration, end session and revocation
endpoints. Configurations are created manually or from discovery metadata
fetched by the host application.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..shared import json_util
from ..shared.preconditions import check_has_scheme

KEY_AUTHORIZATION_ENDPOINT = "authorizationEndpoint"
KEY_TOKEN_ENDPOINT = "tokenEndpoint"
KEY_REGISTRATION_ENDPOINT = "registrationEndpoint"
KEY_END_SESSION_ENDPOINT = "endSessionEndpoint"
KEY_REVOCATION_ENDPOINT = "revocationEndpoint"


class AuthorizationServiceConfiguration(BaseModel):
    """
    Endpoints of an OAuth 2.0 / OpenID Connect provider.

    All endpoints must be absolute URIs with a scheme.
    """
    authorization_endpoint: str = Field(..., description="Authorization endpoint URI")
    token_endpoint: str = Field(..., description="Token endpoint URI")
    registration_endpoint: Optional[str] = Field(
        default=None,
        description="Dynamic client registration endpoint URI"
    )
    end_session_endpoint: Optional[str] = Field(
        default=None,
        description="OpenID Connect RP-initiated logout endpoint URI"
    )
    revocation_endpoint: Optional[str] = Field(
        default=None,
        description="RFC 7009 token revocation endpoint URI"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator(
        'authorization_endpoint',
        'token_endpoint',
        'registration_endpoint',
        'end_session_endpoint',
        'revocation_endpoint',
    )
    @classmethod
    def validate_endpoint(cls, v):
        """Endpoints must carry a scheme."""
        if v is not None:
            check_has_scheme(v, f"endpoint must have a scheme: {v!r}")
        return v

    @classmethod
    def from_discovery(cls, discovery_doc: Dict[str, Any]) -> "AuthorizationServiceConfiguration":
        """
        Create a configuration from an already fetched discovery document.

        Uses the standard OpenID Connect Discovery metadata names.
        """
        return cls(
            authorization_endpoint=json_util.get_uri(discovery_doc, "authorization_endpoint"),
            token_endpoint=json_util.get_uri(discovery_doc, "token_endpoint"),
            registration_endpoint=json_util.get_uri_if_defined(discovery_doc, "registration_endpoint"),
            end_session_endpoint=json_util.get_uri_if_defined(discovery_doc, "end_session_endpoint"),
            revocation_endpoint=json_util.get_uri_if_defined(discovery_doc, "revocation_endpoint"),
        )

    def to_json(self) -> Dict[str, Any]:
        """Convert the configuration to a JSON object for storage."""
        json_obj: Dict[str, Any] = {}
        json_util.put(json_obj, KEY_AUTHORIZATION_ENDPOINT, self.authorization_endpoint)
        json_util.put(json_obj, KEY_TOKEN_ENDPOINT, self.token_endpoint)
        json_util.put_if_not_null(json_obj, KEY_REGISTRATION_ENDPOINT, self.registration_endpoint)
        json_util.put_if_not_null(json_obj, KEY_END_SESSION_ENDPOINT, self.end_session_endpoint)
        json_util.put_if_not_null(json_obj, KEY_REVOCATION_ENDPOINT, self.revocation_endpoint)
        return json_obj

    def to_json_string(self) -> str:
        return json_util.to_json_string(self.to_json())

    @classmethod
    def from_json(cls, json_obj: Dict[str, Any]) -> "AuthorizationServiceConfiguration":
        """
        Read a configuration produced by :meth:`to_json`.

        Raises:
            MalformedJsonError: If a required endpoint is missing, or an endpoint is
                not a string or has no scheme
        """
        return cls(
            authorization_endpoint=json_util.get_uri(json_obj, KEY_AUTHORIZATION_ENDPOINT),
            token_endpoint=json_util.get_uri(json_obj, KEY_TOKEN_ENDPOINT),
            registration_endpoint=json_util.get_uri_if_defined(json_obj, KEY_REGISTRATION_ENDPOINT),
            end_session_endpoint=json_util.get_uri_if_defined(json_obj, KEY_END_SESSION_ENDPOINT),
            revocation_endpoint=json_util.get_uri_if_defined(json_obj, KEY_REVOCATION_ENDPOINT),
        )

    @classmethod
    def from_json_string(cls, json_str: str) -> "AuthorizationServiceConfiguration":
        return cls.from_json(json_util.parse_json_object(json_str))
