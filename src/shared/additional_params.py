"""
Validation and extraction of additional (non-standard) protocol parameters.

Each message type declares the protocol parameter names it reserves; extra
parameters supplied by callers or received from servers must never use
one of them.
"""

from types import MappingProxyType
from typing import AbstractSet, Any, Dict, Mapping, Optional

from .exceptions import InvalidArgumentError
from .json_util import json_value_to_string


def check_additional_params(params: Optional[Mapping[str, str]],
                            reserved: AbstractSet[str]) -> Mapping[str, str]:
    """
    Validate additional parameters against a reserved parameter set.

    Args:
        params: Caller-supplied parameters, or None
        reserved: Parameter names defined by the protocol for this message

    Returns:
        Mapping[str, str]: Read-only copy of params, in insertion order
            (empty when params is None)

    Raises:
        InvalidArgumentError: If a key is reserved, or a key or value is None
    """
    if params is None:
        return MappingProxyType({})

    checked: Dict[str, str] = {}
    for key, value in params.items():
        if key is None:
            raise InvalidArgumentError("additional parameter keys cannot be None")
        if value is None:
            raise InvalidArgumentError(f"value of additional parameter \"{key}\" cannot be None")
        if key in reserved:
            raise InvalidArgumentError(
                f"Parameter {key} is directly supported via the message model "
                f"and cannot be used as an additional parameter"
            )
        checked[key] = value

    return MappingProxyType(checked)


def extract_additional_params(json_obj: Mapping[str, Any],
                              reserved: AbstractSet[str]) -> Dict[str, str]:
    """
    Collect every field of a JSON object that is not a reserved parameter.

    Used for responses whose extra fields sit beside the protocol fields
    rather than in a nested object. Values are rendered as their JSON text.
    """
    return {
        key: json_value_to_string(value)
        for key, value in json_obj.items()
        if key not in reserved
    }


def extract_additional_params_from_query(query_params: Mapping[str, str],
                                         reserved: AbstractSet[str]) -> Dict[str, str]:
    """Collect every query parameter of a redirect URI that is not reserved."""
    return {
        key: value
        for key, value in query_params.items()
        if key not in reserved
    }
