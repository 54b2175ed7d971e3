"""
Exception hierarchy for OAuth 2.0 message construction and parsing.

Every failure raised while building, validating or (de)serializing a protocol
message derives from OAuthMessageError, which is itself a ValueError so that
callers treating bad input generically keep working.
"""

from typing import Optional


class OAuthMessageError(ValueError):
    """Base exception for all OAuth message errors."""


class InvalidArgumentError(OAuthMessageError):
    """
    Raised when a required value is missing or empty, or when a value
    cannot be matched to any known message variant.
    """


class MalformedJsonError(OAuthMessageError):
    """
    Raised when a JSON document cannot be parsed, or is missing a required
    key, or holds a value of the wrong type for a key.
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class FormatError(OAuthMessageError):
    """Raised when a constrained string fails its format rule."""


class CodeVerifierFormatError(FormatError):
    """Raised when a PKCE code verifier violates RFC 7636 section 4.1."""


class UriFormatError(FormatError, InvalidArgumentError):
    """Raised when a URI is missing its scheme or cannot be parsed."""


class OAuthRedirectError(InvalidArgumentError):
    """
    Raised when an interactive flow redirects back with an OAuth error
    response instead of a result.

    The parsed error is available as ``error`` (an OAuthError model).
    """

    def __init__(self, error):
        description = f": {error.error_description}" if error.error_description else ""
        super().__init__(f"Authorization server returned '{error.error}'{description}")
        self.error = error
