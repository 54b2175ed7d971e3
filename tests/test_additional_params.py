"""
Unit tests for additional parameter validation and extraction.
"""

import pytest

from src.shared.additional_params import (
    check_additional_params,
    extract_additional_params,
    extract_additional_params_from_query,
)
from src.shared.exceptions import InvalidArgumentError

RESERVED = frozenset({"client_id", "redirect_uri", "token"})


class TestCheckAdditionalParams:
    """Test cases for check_additional_params."""

    def test_none_returns_empty_mapping(self):
        """Test that absent parameters produce an empty mapping."""
        assert dict(check_additional_params(None, RESERVED)) == {}

    def test_returns_equal_copy(self):
        """Test that non-overlapping parameters are returned unchanged."""
        params = {"audience": "api", "resource": "https://api.example"}
        checked = check_additional_params(params, RESERVED)

        assert dict(checked) == params
        assert list(checked.keys()) == ["audience", "resource"]

    def test_copy_is_independent_of_input(self):
        """Test that later changes to the input do not leak into the result."""
        params = {"audience": "api"}
        checked = check_additional_params(params, RESERVED)
        params["audience"] = "changed"
        params["extra"] = "value"

        assert dict(checked) == {"audience": "api"}

    def test_result_is_read_only(self):
        """Test that the returned mapping cannot be modified."""
        checked = check_additional_params({"audience": "api"}, RESERVED)

        with pytest.raises(TypeError):
            checked["audience"] = "other"

    @pytest.mark.parametrize("reserved_key", sorted(RESERVED))
    def test_rejects_reserved_keys(self, reserved_key):
        """Test that every reserved key is rejected."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            check_additional_params({"audience": "api", reserved_key: "x"}, RESERVED)
        assert reserved_key in str(exc_info.value)

    def test_rejects_none_values(self):
        """Test that None values are rejected."""
        with pytest.raises(InvalidArgumentError):
            check_additional_params({"audience": None}, RESERVED)


class TestExtractAdditionalParams:
    """Test cases for extract_additional_params."""

    def test_skips_reserved_keys(self):
        """Test that reserved keys are left out."""
        extracted = extract_additional_params({"token": "abc", "foo": "bar"}, {"token"})
        assert extracted == {"foo": "bar"}

    def test_renders_values_as_json_text(self):
        """Test that non-string values use their JSON text form."""
        extracted = extract_additional_params(
            {"flag": True, "count": 3, "nothing": None, "nested": {"a": "b"}, "list": [1, 2]},
            set()
        )

        assert extracted == {
            "flag": "true",
            "count": "3",
            "nothing": "null",
            "nested": '{"a":"b"}',
            "list": "[1,2]",
        }

    def test_empty_object(self):
        """Test extraction from an empty object."""
        assert extract_additional_params({}, {"token"}) == {}


class TestExtractAdditionalParamsFromQuery:
    """Test cases for extract_additional_params_from_query."""

    def test_skips_reserved_keys(self):
        """Test that reserved query parameters are left out."""
        extracted = extract_additional_params_from_query(
            {"code": "abc", "state": "s", "session_state": "xyz"},
            {"code", "state"}
        )
        assert extracted == {"session_state": "xyz"}
