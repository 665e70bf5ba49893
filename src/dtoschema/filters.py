"""Query-string helpers: filter trees, sort selection and pagination bounds."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping, Sequence, Union

from dtoschema.errors import InvalidInputError
from dtoschema.schema.nodes import SchemaNode

__all__ = [
    "FilterMapping",
    "FilterOperator",
    "ParsedSort",
    "Pagination",
    "create_filter_mappings",
    "parse_filter",
    "parse_sort",
    "normalize_pagination",
]

FilterOperator = Literal[
    "equals",
    "not",
    "in",
    "notIn",
    "lt",
    "lte",
    "gt",
    "gte",
    "contains",
    "startsWith",
    "endsWith",
    "isEmpty",
    "isNotEmpty",
]
SortDirection = Literal["asc", "desc"]
FieldPath = Union[str, Sequence[str]]

_BRACKET_RE = re.compile(r"\[(.*?)\]")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)", re.ASCII)


@dataclass(frozen=True)
class FilterMapping:
    """Maps one query key onto a (possibly nested) filter field.

    ``field`` is a dotted path such as ``posts.some.title`` or a list of
    segments. ``schema`` documents and validates the query value when the
    mapping is used to build a query DTO.
    """

    field: FieldPath
    operator: str = "equals"
    schema: SchemaNode | None = None


@dataclass(frozen=True)
class ParsedSort:
    sort_by: str
    sort_direction: SortDirection
    field: FieldPath


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def create_filter_mappings(fields: Iterable[Mapping[str, Any] | Sequence[Any]]) -> dict[str, FilterMapping]:
    """Build a query-key -> FilterMapping table.

    Each entry is a mapping with ``query_key``, ``field`` and optionally
    ``operator`` and ``schema``, or a ``(query_key, field[, operator])`` tuple.

    Raises:
        InvalidInputError: If an entry has neither shape.
    """
    mappings: dict[str, FilterMapping] = {}
    for entry in fields:
        if isinstance(entry, Mapping):
            query_key = entry.get("query_key")
            mapping = FilterMapping(
                field=entry.get("field", query_key),
                operator=entry.get("operator", "equals"),
                schema=entry.get("schema"),
            )
        elif isinstance(entry, Sequence) and not isinstance(entry, str) and 2 <= len(entry) <= 3:
            query_key = entry[0]
            mapping = FilterMapping(field=entry[1], operator=entry[2] if len(entry) == 3 else "equals")
        else:
            raise InvalidInputError(message=f"Invalid filter mapping entry: {entry!r}")
        if not isinstance(query_key, str) or not query_key:
            raise InvalidInputError(message=f"Filter mapping needs a query key: {entry!r}")
        mappings[query_key] = mapping
    return mappings


def parse_filter(
    query: Mapping[str, Any] | None,
    mappings: Mapping[str, FilterMapping],
) -> dict[str, Any] | None:
    """Build a nested filter from query parameters.

    Example::

        parse_filter({"title": "Hello"}, {"title": FilterMapping("posts.some.title", "contains")})
        # {"posts": {"some": {"title": {"contains": "Hello"}}}}

    Missing, ``None``, ``""`` and empty-list values are skipped. Returns None
    when nothing was set.
    """
    if not query or not mappings:
        return None

    result: dict[str, Any] = {}
    for query_key, mapping in mappings.items():
        if mapping is None:
            continue
        value = _query_value(query, query_key)
        if _is_skippable(value):
            continue
        path = _normalize_path(mapping.field)
        if not path:
            continue
        _set_filter_value(result, path, mapping.operator or "equals", value)
    return result or None


def parse_sort(
    query: Mapping[str, Any] | None,
    sortable_columns: Mapping[str, FieldPath],
    sort_by_key: str = "sortBy",
    sort_direction_key: str = "sortDirection",
    default_sort_by: str | None = None,
    default_sort_direction: SortDirection = "asc",
) -> ParsedSort | None:
    """Pick a sort column from the allowed set, falling back to the default.

    Returns None when neither the requested nor the default column is allowed.
    """
    if query is None or not sortable_columns:
        return None

    requested = _trimmed(query.get(sort_by_key))
    if requested and requested in sortable_columns:
        sort_by = requested
    elif default_sort_by and default_sort_by in sortable_columns:
        sort_by = default_sort_by
    else:
        return None

    direction = _trimmed(query.get(sort_direction_key))
    if direction not in ("asc", "desc"):
        direction = default_sort_direction
    return ParsedSort(sort_by=sort_by, sort_direction=direction, field=sortable_columns[sort_by])  # type: ignore[arg-type]


def normalize_pagination(
    page: Any = None,
    page_size: Any = None,
    *,
    default_page: int = 1,
    default_page_size: int = 10,
    min_page: int = 1,
    min_page_size: int = 1,
    max_page_size: int | None = None,
) -> Pagination:
    """Read page and page size leniently and pin them to their bounds.

    Unreadable values fall back to the defaults; ``"12abc"`` reads as 12.
    """
    resolved_page = max(min_page, _to_int(page, default_page))
    resolved_size = max(min_page_size, _to_int(page_size, default_page_size))
    if max_page_size is not None:
        resolved_size = min(max_page_size, resolved_size)
    return Pagination(page=resolved_page, page_size=resolved_size)


# ----- Helpers -----


def _split_path(path: str) -> list[str]:
    if not path:
        return []
    normalized = _BRACKET_RE.sub(r".\1", path)
    return [segment.strip() for segment in normalized.split(".") if segment.strip()]


def _normalize_path(path: FieldPath) -> list[str]:
    if isinstance(path, str):
        return _split_path(path)
    return [str(segment) for segment in path if str(segment)]


def _query_value(query: Mapping[str, Any], query_key: str) -> Any:
    if query_key in query:
        return query[query_key]
    current: Any = query
    for segment in _split_path(query_key):
        if current is None:
            return None
        if isinstance(current, (list, tuple)):
            if not segment.isdigit() or int(segment) >= len(current):
                return None
            current = current[int(segment)]
        elif isinstance(current, Mapping):
            current = current.get(segment)
        else:
            return None
    return current if current is not query else None


def _is_skippable(value: Any) -> bool:
    if value is None or value == "":
        return True
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _set_filter_value(target: dict[str, Any], path: list[str], operator: str, value: Any) -> None:
    cursor = target
    for segment in path:
        existing = cursor.get(segment)
        if not isinstance(existing, dict):
            existing = {}
            cursor[segment] = existing
        cursor = existing
    cursor[operator] = value


def _trimmed(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _to_int(value: Any, fallback: int) -> int:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, bool) or value is None:
        return fallback
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else fallback
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match is None:
            return fallback
        try:
            return int(match.group(1))
        except ValueError:
            # Longer than the interpreter's integer digit limit.
            return fallback
    return fallback
