"""
Resource rows and column definitions shared by every collector.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from .constants import (
    ARN_HEADER,
    CATEGORY_HEADER,
    NAME_HEADER,
    NOT_AVAILABLE,
    REGION_HEADER,
    SUB_CATEGORY_HEADERS,
)
from .normalizer import get_map_value, normalize_raw_data, string_value


@dataclass(frozen=True)
class Resource:
    """One normalized output row representing one discovered cloud object."""

    category: str
    name: str = ""
    region: str = ""
    arn: str = ""
    sub_category1: str = ""
    sub_category2: str = ""
    sub_category3: str = ""
    raw_data: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        # raw_data is read-only once the row exists
        object.__setattr__(self, "raw_data", MappingProxyType(dict(self.raw_data or {})))

    def sort_key(self) -> Tuple[str, str, str, str, str]:
        return (
            self.category,
            self.sub_category1,
            self.sub_category2,
            self.sub_category3,
            self.name,
        )

    def get(self, key: str) -> str:
        return get_map_value(self.raw_data, key)


@dataclass(frozen=True)
class Column:
    """A CSV column: a header and an accessor producing the cell string."""

    header: str
    value: Callable[[Resource], str]


def new_resource(
    category: Any,
    name: Any = None,
    region: Any = None,
    arn: Any = None,
    sub_category1: Any = None,
    sub_category2: Any = None,
    sub_category3: Any = None,
    raw_data: Optional[Mapping[str, Any]] = None,
) -> Resource:
    """
    Build a Resource from raw API values.

    Every field and every raw_data value is normalized to a plain string, so
    callers may pass optional values, timestamps, lists or nested structures
    straight from a boto3 response.

    Args:
        category: Top-level resource type tag
        name: Display name (may be absent)
        region: Region the resource lives in
        arn: Resource ARN (may be absent)
        sub_category1: First grouping level
        sub_category2: Second grouping level
        sub_category3: Third grouping level
        raw_data: Collector-defined column values

    Returns:
        Immutable Resource
    """
    return Resource(
        category=string_value(category),
        name=string_value(name),
        region=string_value(region),
        arn=string_value(arn),
        sub_category1=string_value(sub_category1),
        sub_category2=string_value(sub_category2),
        sub_category3=string_value(sub_category3),
        raw_data=normalize_raw_data(raw_data),
    )


def sort_resources(resources: Iterable[Resource]) -> List[Resource]:
    """Sort by (category, sub categories, name) in code point order."""
    return sorted(resources, key=Resource.sort_key)


def field_column(header: str, attribute: str) -> Column:
    return Column(header, lambda r: getattr(r, attribute, "") or "")


def raw_column(header: str, key: Optional[str] = None) -> Column:
    """Column reading ``raw_data[key]``; the key defaults to the header."""
    lookup = key or header
    return Column(header, lambda r: get_map_value(r.raw_data, lookup))


def name_column(header: str = NAME_HEADER) -> Column:
    return Column(header, lambda r: r.name or NOT_AVAILABLE)


def standard_columns(depth: int = 1, include_arn: bool = True) -> List[Column]:
    """
    Leading columns shared by collectors.

    Args:
        depth: Number of SubCategory columns (0-3)
        include_arn: Whether to append the ARN column

    Returns:
        Category, SubCategory1..depth, Name, Region[, ARN]
    """
    columns = [field_column(CATEGORY_HEADER, "category")]
    for index, header in enumerate(SUB_CATEGORY_HEADERS[:depth], start=1):
        columns.append(field_column(header, f"sub_category{index}"))
    columns.append(name_column())
    columns.append(field_column(REGION_HEADER, "region"))
    if include_arn:
        columns.append(field_column(ARN_HEADER, "arn"))
    return columns


def headers(columns: Iterable[Column]) -> List[str]:
    return [column.header for column in columns]


def render_row(resource: Resource, columns: Iterable[Column]) -> List[str]:
    return [column.value(resource) for column in columns]
