"""Tests for inventory/normalizer.py: canonical cell strings for every API value shape."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum

import pytest

from inventory.normalizer import (
    format_json_indent,
    format_number,
    get_map_value,
    key_value_lines,
    normalize_raw_data,
    string_value,
    unix_millis_to_datetime,
)


class Color(Enum):
    RED = "red"


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------
class TestScalars:
    def test_none_gives_default(self):
        assert string_value(None) == ""
        assert string_value(None, "N/A") == "N/A"

    def test_empty_string_gives_default(self):
        assert string_value("", "N/A") == "N/A"

    def test_string_unchanged(self):
        assert string_value("  spaced ") == "  spaced "

    def test_bool(self):
        assert string_value(True) == "true"
        assert string_value(False) == "false"

    def test_int(self):
        assert string_value(0) == "0"
        assert string_value(-42) == "-42"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1.0, "1"),
            (1.5, "1.5"),
            (1e21, "1000000000000000000000"),
            (1e-7, "0.0000001"),
            (Decimal("3.1400"), "3.14"),
            (Decimal("100"), "100"),
            (-0.0, "0"),
        ],
    )
    def test_numbers_have_no_exponent(self, value, expected):
        assert string_value(value) == expected
        assert format_number(value) == expected

    def test_enum_uses_value(self):
        assert string_value(Color.RED) == "red"

    def test_bytes_decoded(self):
        assert string_value(b"abc") == "abc"


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------
class TestTimestamps:
    def test_aware_datetime_converted_to_utc(self):
        tokyo = timezone(timedelta(hours=9))
        value = datetime(2024, 1, 2, 9, 30, 0, tzinfo=tokyo)
        assert string_value(value) == "2024-01-02T00:30:00Z"

    def test_naive_datetime_taken_as_utc(self):
        assert string_value(datetime(2024, 5, 6, 7, 8, 9)) == "2024-05-06T07:08:09Z"

    def test_date(self):
        assert string_value(date(2024, 5, 6)) == "2024-05-06"

    def test_unix_millis(self):
        value = unix_millis_to_datetime(1704067200000)
        assert string_value(value) == "2024-01-01T00:00:00Z"
        assert unix_millis_to_datetime(None) is None


# ---------------------------------------------------------------------------
# Compound values
# ---------------------------------------------------------------------------
class TestCompound:
    def test_list_joined_with_newlines_in_order(self):
        assert string_value(["b", "a", "b"]) == "b\na\nb"

    def test_list_drops_none(self):
        assert string_value(["a", None, "c"]) == "a\nc"

    def test_list_keeps_empty_items(self):
        assert string_value(["a", "", "b"]) == "a\n\nb"

    def test_empty_list_gives_default(self):
        assert string_value([], "N/A") == "N/A"

    def test_tag_list_as_key_value_lines(self):
        tags = [{"Key": "Name", "Value": "web"}, {"Key": "env", "Value": "prod"}]
        assert string_value(tags) == "Name=web\nenv=prod"

    def test_environment_list_as_key_value_lines(self):
        env = [{"name": "A", "value": "1"}]
        assert string_value(env) == "A=1"

    def test_flat_mapping_as_key_value_lines(self):
        assert string_value({"a": 1, "b": True}) == "a=1\nb=true"

    def test_nested_mapping_as_indented_json(self):
        value = {"outer": {"inner": datetime(2024, 1, 1, tzinfo=timezone.utc)}}
        assert string_value(value) == '{\n  "outer": {\n    "inner": "2024-01-01T00:00:00Z"\n  }\n}'

    def test_list_of_dicts_as_json(self):
        assert string_value([{"a": {"b": 1}}]).startswith("[\n  {")


# ---------------------------------------------------------------------------
# Idempotence
# ---------------------------------------------------------------------------
class TestIdempotence:
    @pytest.mark.parametrize(
        "value",
        [
            None,
            "",
            "plain",
            True,
            12,
            1.25,
            Decimal("1E+3"),
            datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
            ["x", "y"],
            [{"Key": "k", "Value": "v"}],
            {"a": 1},
            {"nested": {"list": [1, 2]}},
        ],
    )
    def test_string_value_is_idempotent(self, value):
        once = string_value(value)
        assert string_value(once) == once


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
class TestHelpers:
    def test_normalize_raw_data_keeps_key_order(self):
        data = normalize_raw_data({"z": 1, "a": None, "m": [1, 2]})
        assert list(data) == ["z", "a", "m"]
        assert data == {"z": "1", "a": "", "m": "1\n2"}

    def test_normalize_raw_data_none(self):
        assert normalize_raw_data(None) == {}

    def test_get_map_value_missing(self):
        assert get_map_value({"a": "1"}, "b") == ""
        assert get_map_value(None, "a") == ""
        assert get_map_value({"a": "1"}, "a") == "1"

    def test_format_json_indent_reindents_json_string(self):
        assert format_json_indent('{"a":1}') == '{\n  "a": 1\n}'

    def test_format_json_indent_returns_raw_non_json(self):
        assert format_json_indent("not json") == "not json"

    def test_format_json_indent_none(self):
        assert format_json_indent(None) == ""

    def test_key_value_lines(self):
        assert key_value_lines([("a", 1), ("b", None)]) == ["a=1", "b="]
