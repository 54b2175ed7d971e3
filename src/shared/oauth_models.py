"""
Shared Pydantic models and enumerations for OAuth 2.0 messages.

This module defines the immutable base model every protocol message derives
from, the protocol enumerations used across message types, and the RFC 6749
error response model.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PKCEMethod(str, Enum):
    """PKCE code challenge methods as defined in RFC 7636."""
    S256 = "S256"
    PLAIN = "plain"


class ResponseType(str, Enum):
    """OAuth 2.0 / OpenID Connect response types."""
    CODE = "code"
    TOKEN = "token"
    ID_TOKEN = "id_token"


class ManagementKind(str, Enum):
    """Variant tag for requests and responses driven by an interactive flow."""
    AUTHORIZATION = "authorization"
    END_SESSION = "end_session"


class MessageModel(BaseModel):
    """
    Base model for protocol messages.

    Messages are frozen once built; their additional parameters are exposed
    as a read-only mapping.
    """

    model_config = ConfigDict(frozen=True)

    @field_validator('additional_parameters', mode='after', check_fields=False)
    @classmethod
    def freeze_additional_parameters(cls, v):
        """Store additional parameters as a read-only, ordered mapping."""
        return MappingProxyType(dict(v))

    def __hash__(self) -> int:
        # mappingproxy is unhashable; hash its items so equal messages hash equal
        return hash((self.__class__, tuple(
            tuple(value.items()) if isinstance(value, MappingProxyType) else value
            for value in self.__dict__.values()
        )))


class OAuthError(BaseModel):
    """
    OAuth 2.0 error response model.

    Standard error response format as defined in RFC 6749 section 4.1.2.1,
    as received in the query of a redirect URI.
    """
    error: str = Field(..., min_length=1, description="Error code")
    error_description: Optional[str] = Field(
        default=None,
        description="Human-readable error description"
    )
    error_uri: Optional[str] = Field(
        default=None,
        description="URI with error information"
    )
    state: Optional[str] = Field(
        default=None,
        description="State parameter from request"
    )

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_query_parameters(cls, params: Mapping[str, str]) -> "OAuthError":
        """Build an error from the query parameters of an error redirect."""
        return cls(
            error=params["error"],
            error_description=params.get("error_description"),
            error_uri=params.get("error_uri"),
            state=params.get("state"),
        )
