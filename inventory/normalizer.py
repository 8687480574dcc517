"""
Normalization of API response values into canonical string cells.

Every value placed into a Resource passes through ``string_value`` so that
output rendering never has to inspect source types.
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Field names recognized in key/value shaped entries (tags, environment variables)
KEY_FIELDS = ("Key", "Name", "key", "name")
VALUE_FIELDS = ("Value", "value")

_SCALAR_TYPES = (str, bool, int, float, Decimal, datetime, date, Enum, bytes, bytearray)


def string_value(value: Any, default: str = "") -> str:
    """
    Convert any API value to its canonical string representation.

    Args:
        value: Value read from an API response (may be None)
        default: Returned for absent or empty values

    Returns:
        Canonical string for a single output cell
    """
    if value is None:
        return default
    if isinstance(value, Enum):
        return string_value(value.value, default)
    if isinstance(value, str):
        return str(value) if value else default
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        return format_number(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray)):
        return string_value(bytes(value).decode("utf-8", errors="replace"), default)
    if isinstance(value, Mapping):
        if not value:
            return default
        if _is_flat(value.values()):
            return "\n".join(key_value_lines(value.items()))
        return format_json_indent(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return _list_value(value, default)
    return format_json_indent(value) or default


def _list_value(value, default: str) -> str:
    items = sorted(value, key=str) if isinstance(value, (set, frozenset)) else list(value)
    items = [item for item in items if item is not None]
    if not items:
        return default
    if all(_is_key_value_entry(item) for item in items):
        return "\n".join(key_value_lines(_key_value_pair(item) for item in items))
    if _is_flat(items):
        return "\n".join(string_value(item) for item in items) or default
    return format_json_indent(items)


def format_number(value) -> str:
    """Render an int, float or Decimal as a plain decimal without exponent."""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return str(value)
        value = Decimal(repr(value))
    if not value.is_finite():
        return str(value)
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_timestamp(value: datetime) -> str:
    """Render a datetime as RFC 3339 in UTC. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(RFC3339_FORMAT)


def unix_millis_to_datetime(millis: Optional[int]) -> Optional[datetime]:
    if millis is None:
        return None
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def key_value_lines(pairs: Iterable[Tuple[Any, Any]]) -> List[str]:
    """Render (key, value) pairs as ``Key=Value`` strings, in order."""
    return [f"{string_value(key)}={string_value(value)}" for key, value in pairs]


def format_json_indent(value: Any) -> str:
    """
    Render a value as indented JSON text.

    A string is treated as a JSON document and re-indented; when it does not
    parse it is returned unchanged.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        if not value:
            return ""
        try:
            data = json.loads(value)
        except ValueError:
            return value
    else:
        data = value
    return json.dumps(data, indent=2, default=_json_default, ensure_ascii=False)


def normalize_raw_data(data: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Normalize every value of a raw-data mapping, keeping key order."""
    if not data:
        return {}
    return {str(key): string_value(value) for key, value in data.items()}


def get_map_value(data: Optional[Mapping[str, Any]], key: str) -> str:
    """Read one raw-data cell; missing keys and missing mappings give ''."""
    if not data:
        return ""
    return string_value(data.get(key))


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format_number(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def _is_flat(values: Iterable[Any]) -> bool:
    return all(value is None or isinstance(value, _SCALAR_TYPES) for value in values)


def _is_key_value_entry(item: Any) -> bool:
    if not isinstance(item, Mapping) or not item:
        return False
    keys = set(item.keys())
    has_key = any(field in keys for field in KEY_FIELDS)
    has_value = any(field in keys for field in VALUE_FIELDS)
    return has_key and has_value and keys <= set(KEY_FIELDS + VALUE_FIELDS)


def _key_value_pair(item: Mapping[str, Any]) -> Tuple[Any, Any]:
    key = next(item[field] for field in KEY_FIELDS if field in item)
    value = next(item[field] for field in VALUE_FIELDS if field in item)
    return key, value
