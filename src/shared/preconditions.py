"""
Argument validation helpers for OAuth message builders.

These checks raise immediately so that builders never hold a partially
valid value, and return the checked value so they can be used inline.
"""

from typing import Any, Optional, TypeVar

from .exceptions import InvalidArgumentError, UriFormatError
from .uri_util import get_scheme

T = TypeVar("T")


def check_not_none(value: Optional[T], message: Optional[str] = None) -> T:
    """
    Ensure a value is not None.

    Args:
        value: Value to check
        message: Error message used when the check fails

    Returns:
        The value, unchanged

    Raises:
        InvalidArgumentError: If the value is None
    """
    if value is None:
        raise InvalidArgumentError(message or "value cannot be None")
    return value


def check_not_empty(value: Optional[str], message: Optional[str] = None) -> str:
    """
    Ensure a string is neither None nor empty.

    Args:
        value: String to check
        message: Error message used when the check fails

    Returns:
        The string, unchanged

    Raises:
        InvalidArgumentError: If the string is None, not a string, or empty
    """
    check_not_none(value, message)
    if not isinstance(value, str) or len(value) == 0:
        raise InvalidArgumentError(message or "value cannot be empty")
    return value


def check_argument(expression: Any, message: str) -> None:
    """Raise InvalidArgumentError unless expression is truthy."""
    if not expression:
        raise InvalidArgumentError(message)


def check_has_scheme(uri: Optional[str], message: Optional[str] = None) -> str:
    """
    Ensure a URI string carries a scheme component.

    Custom schemes such as ``com.example.app:/oauth2redirect`` are accepted;
    bare paths such as ``/callback`` are not.

    Raises:
        UriFormatError: If the URI is None, not a string, or has no scheme
    """
    if not isinstance(uri, str) or get_scheme(uri) is None:
        raise UriFormatError(message or f"URI must have a scheme: {uri!r}")
    return uri
