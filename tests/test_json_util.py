"""
Unit tests for the JSON field accessors.
"""

import pytest

from src.shared import json_util
from src.shared.exceptions import InvalidArgumentError, MalformedJsonError


class TestParseJsonObject:
    """Test cases for parse_json_object."""

    def test_parses_object(self):
        """Test that a JSON object is parsed into a dict."""
        assert json_util.parse_json_object('{"a": "b"}') == {"a": "b"}

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", '"string"', "", None])
    def test_rejects_invalid_documents(self, text):
        """Test that invalid or non-object documents are rejected."""
        with pytest.raises(MalformedJsonError):
            json_util.parse_json_object(text)


class TestGetters:
    """Test cases for the read accessors."""

    def test_get_string(self):
        """Test reading a required string."""
        assert json_util.get_string({"key": "value"}, "key") == "value"

    def test_get_string_missing(self):
        """Test that a missing required string is malformed JSON."""
        with pytest.raises(MalformedJsonError) as exc_info:
            json_util.get_string({}, "key")
        assert exc_info.value.key == "key"

    def test_get_string_wrong_type(self):
        """Test that a non-string value is malformed JSON."""
        with pytest.raises(MalformedJsonError):
            json_util.get_string({"key": 12}, "key")

    def test_get_string_if_defined(self):
        """Test optional string reads."""
        assert json_util.get_string_if_defined({}, "key") is None
        assert json_util.get_string_if_defined({"key": None}, "key") is None
        assert json_util.get_string_if_defined({"key": "v"}, "key") == "v"

        with pytest.raises(MalformedJsonError):
            json_util.get_string_if_defined({"key": ["v"]}, "key")

    def test_get_uri_if_defined(self):
        """Test optional URI reads."""
        assert json_util.get_uri_if_defined({}, "uri") is None
        assert json_util.get_uri_if_defined({"uri": "https://a.b/c"}, "uri") == "https://a.b/c"

        with pytest.raises(MalformedJsonError):
            json_util.get_uri_if_defined({"uri": {"scheme": "https"}}, "uri")

    def test_get_uri_requires_scheme(self):
        """Test that stored URIs without a scheme are malformed JSON."""
        assert json_util.get_uri({"uri": "com.example.app:/cb"}, "uri") == "com.example.app:/cb"

        with pytest.raises(MalformedJsonError) as exc_info:
            json_util.get_uri({"uri": "/revoke"}, "uri")
        assert exc_info.value.key == "uri"

        with pytest.raises(MalformedJsonError):
            json_util.get_uri_if_defined({"uri": "auth.example.com/authorize"}, "uri")

        with pytest.raises(MalformedJsonError):
            json_util.get_uri({}, "uri")

    def test_get_long_if_defined(self):
        """Test optional integer reads."""
        assert json_util.get_long_if_defined({}, "exp") is None
        assert json_util.get_long_if_defined({"exp": 1700000000000}, "exp") == 1700000000000

        for bad in ("123", True, 1.5):
            with pytest.raises(MalformedJsonError):
                json_util.get_long_if_defined({"exp": bad}, "exp")

    def test_get_json_object(self):
        """Test reading a required nested object."""
        assert json_util.get_json_object({"c": {"a": 1}}, "c") == {"a": 1}

        with pytest.raises(MalformedJsonError):
            json_util.get_json_object({}, "c")
        with pytest.raises(MalformedJsonError):
            json_util.get_json_object({"c": "text"}, "c")


class TestGetStringMap:
    """Test cases for get_string_map."""

    def test_absent_key_gives_empty_map(self):
        """Test that an absent key reads as an empty mapping."""
        assert json_util.get_string_map({}, "params") == {}

    def test_reads_in_order(self):
        """Test that nested values are read in document order."""
        json_obj = json_util.parse_json_object('{"params": {"z": "1", "a": "2", "m": "3"}}')
        assert list(json_util.get_string_map(json_obj, "params").items()) == [
            ("z", "1"), ("a", "2"), ("m", "3")
        ]

    def test_stringifies_scalars(self):
        """Test that numbers and booleans are read as their JSON text."""
        result = json_util.get_string_map({"params": {"n": 5, "b": False}}, "params")
        assert result == {"n": "5", "b": "false"}

    @pytest.mark.parametrize("value", [{"a": "b"}, ["a"], None])
    def test_rejects_non_scalars(self, value):
        """Test that nested objects, arrays and null are rejected."""
        with pytest.raises(MalformedJsonError):
            json_util.get_string_map({"params": {"bad": value}}, "params")

    def test_rejects_non_object(self):
        """Test that a non-object value is rejected."""
        with pytest.raises(MalformedJsonError):
            json_util.get_string_map({"params": "text"}, "params")


class TestWriters:
    """Test cases for the write accessors."""

    def test_put(self):
        """Test writing a required value."""
        json_obj = {}
        json_util.put(json_obj, "key", "value")
        assert json_obj == {"key": "value"}

    def test_put_rejects_none(self):
        """Test that writing None as a required value fails."""
        with pytest.raises(InvalidArgumentError):
            json_util.put({}, "key", None)

    def test_put_if_not_null(self):
        """Test that None values are skipped."""
        json_obj = {}
        json_util.put_if_not_null(json_obj, "skipped", None)
        json_util.put_if_not_null(json_obj, "written", "v")
        assert json_obj == {"written": "v"}

    def test_map_to_json_object_preserves_order(self):
        """Test that mappings are copied in insertion order."""
        result = json_util.map_to_json_object({"b": "1", "a": "2"})
        assert list(result.keys()) == ["b", "a"]

    def test_to_json_string_is_compact(self):
        """Test compact, order-preserving output."""
        assert json_util.to_json_string({"b": "1", "a": {"c": "2"}}) == '{"b":"1","a":{"c":"2"}}'
