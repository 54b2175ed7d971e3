"""
JSON field accessors for message serialization.

Messages are persisted as JSON objects (plain ``dict`` instances, insertion
ordered). These helpers read and write optional and required fields with
consistent error reporting: structural problems raise MalformedJsonError,
programming errors on the write side raise InvalidArgumentError.
"""

import json
from typing import Any, Dict, Mapping, Optional

from .exceptions import InvalidArgumentError, MalformedJsonError
from .uri_util import get_scheme


def parse_json_object(json_str: str) -> Dict[str, Any]:
    """
    Parse a JSON document that must contain a single object.

    Raises:
        MalformedJsonError: If the text is not valid JSON or not an object
    """
    try:
        value = json.loads(json_str)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedJsonError(f"Invalid JSON document: {e}") from e

    if not isinstance(value, dict):
        raise MalformedJsonError("JSON document is not an object")
    return value


def to_json_string(json_obj: Mapping[str, Any]) -> str:
    """Render a JSON object as compact text, keeping key order."""
    return json.dumps(json_obj, separators=(',', ':'), ensure_ascii=False)


def json_value_to_string(value: Any) -> str:
    """
    Render a scalar or nested JSON value the way it appears in JSON text.

    Strings are returned unchanged; everything else uses its compact JSON
    representation (``true``, ``12``, ``null``, ``{"a":"b"}``).
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def get_string(json_obj: Mapping[str, Any], key: str) -> str:
    """
    Read a required string field.

    Raises:
        MalformedJsonError: If the key is absent or its value is not a string
    """
    if key not in json_obj:
        raise MalformedJsonError(f"field \"{key}\" not found in json object", key)

    value = json_obj[key]
    if not isinstance(value, str):
        raise MalformedJsonError(f"field \"{key}\" is not a string", key)
    return value


def get_string_if_defined(json_obj: Mapping[str, Any], key: str) -> Optional[str]:
    """Read an optional string field, returning None when absent or null."""
    if json_obj.get(key) is None:
        return None
    return get_string(json_obj, key)


def get_uri(json_obj: Mapping[str, Any], key: str) -> str:
    """
    Read a required URI field, stored as its string form.

    Raises:
        MalformedJsonError: If the key is absent, its value is not a string,
            or the URI has no scheme
    """
    value = get_string(json_obj, key)
    if get_scheme(value) is None:
        raise MalformedJsonError(f"field \"{key}\" is not a URI with a scheme", key)
    return value


def get_uri_if_defined(json_obj: Mapping[str, Any], key: str) -> Optional[str]:
    """Read an optional URI field, returning None when absent or null."""
    if json_obj.get(key) is None:
        return None
    return get_uri(json_obj, key)


def get_long_if_defined(json_obj: Mapping[str, Any], key: str) -> Optional[int]:
    """Read an optional integer field, returning None when absent or null."""
    value = json_obj.get(key)
    if value is None:
        return None

    # bool is an int subclass but never a valid timestamp
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedJsonError(f"field \"{key}\" is not an integer", key)
    return value


def get_json_object(json_obj: Mapping[str, Any], key: str) -> Dict[str, Any]:
    """
    Read a required nested object.

    Raises:
        MalformedJsonError: If the key is absent or its value is not an object
    """
    if key not in json_obj:
        raise MalformedJsonError(f"field \"{key}\" not found in json object", key)

    value = json_obj[key]
    if not isinstance(value, dict):
        raise MalformedJsonError(f"field \"{key}\" is not a json object", key)
    return value


def get_string_map(json_obj: Mapping[str, Any], key: str) -> Dict[str, str]:
    """
    Read a nested object of scalar values as a string-to-string mapping.

    Returns an empty mapping when the key is absent. Scalars other than
    strings are converted to their JSON text form.

    Raises:
        MalformedJsonError: If the value is not an object, or holds a nested
            object, array or null
    """
    if key not in json_obj:
        return {}

    nested = get_json_object(json_obj, key)
    string_map: Dict[str, str] = {}
    for map_key, value in nested.items():
        if value is None or isinstance(value, (dict, list)):
            raise MalformedJsonError(
                f"value of \"{map_key}\" in \"{key}\" is not a scalar", key
            )
        string_map[map_key] = json_value_to_string(value)
    return string_map


def put(json_obj: Dict[str, Any], key: str, value: Any) -> None:
    """
    Write a required field.

    Raises:
        InvalidArgumentError: If key or value is None
    """
    if key is None:
        raise InvalidArgumentError("json key cannot be None")
    if value is None:
        raise InvalidArgumentError(f"value for \"{key}\" cannot be None")
    json_obj[key] = value


def put_if_not_null(json_obj: Dict[str, Any], key: str, value: Any) -> None:
    """Write a field only if the value is not None."""
    if key is None:
        raise InvalidArgumentError("json key cannot be None")
    if value is not None:
        json_obj[key] = value


def map_to_json_object(mapping: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Copy a string mapping into a nested JSON object, preserving order."""
    if mapping is None:
        raise InvalidArgumentError("map cannot be None")

    json_obj: Dict[str, str] = {}
    for key, value in mapping.items():
        put(json_obj, key, value)
    return json_obj
