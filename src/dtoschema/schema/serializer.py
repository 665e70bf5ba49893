"""Response serialization: converts native values into their wire forms.

Only values whose wire form differs from the Python value are rewritten:
binary content becomes base64 text, dates and timestamps become ISO 8601
strings. Everything else, including values that do not fit their schema,
passes through untouched.
"""

from __future__ import annotations

import base64
import dataclasses
import datetime as dt
from typing import TYPE_CHECKING, Any, Callable, Mapping

from pydantic import BaseModel

from dtoschema.config import Config, ValidationSettings
from dtoschema.schema.formats import is_bytes_like
from dtoschema.schema.nodes import ArrayNode, ObjectNode, RecordNode, RefNode, SchemaNode, StringNode, UnionNode

if TYPE_CHECKING:
    from dtoschema.registry.registry import DtoRegistry

__all__ = ["serialize_response", "format_date", "format_date_time"]


def serialize_response(
    value: Any,
    source: SchemaNode | type,
    registry: DtoRegistry,
    config: Config | None = None,
) -> Any:
    """Convert value into its wire representation according to source.

    source is a schema node or a registered DTO class. Never raises: values
    that do not match the schema, unknown DTOs and cyclic data are returned
    as they are. Values nested deeper than ``validation.max_depth`` are left
    untouched.
    """
    max_depth = (config or Config()).section("validation", ValidationSettings).max_depth
    return _Serializer(registry, max_depth).run(value, source)


def format_date(value: dt.date) -> str:
    """``YYYY-MM-DD``; aware datetimes are taken in UTC first."""
    if isinstance(value, dt.datetime):
        value = _as_utc(value)
        return value.date().isoformat()
    return value.isoformat()


def format_date_time(value: dt.date) -> str:
    """ISO 8601 in UTC with millisecond precision, e.g. ``2024-01-02T03:04:05.000Z``."""
    if not isinstance(value, dt.datetime):
        value = dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)
    value = _as_utc(value)
    return f"{value.strftime('%Y-%m-%dT%H:%M:%S')}.{value.microsecond // 1000:03d}Z"


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


class _Serializer:
    def __init__(self, registry: DtoRegistry, max_depth: int) -> None:
        self._registry = registry
        self._max_depth = max_depth
        self._active: set[int] = set()

    def run(self, value: Any, source: SchemaNode | type) -> Any:
        if value is None:
            return value
        if isinstance(source, SchemaNode):
            return self._with_schema(value, source, 0)
        if isinstance(source, type):
            return self._with_dto(value, source, 0)
        return value

    def _with_dto(self, value: Any, dto: type, depth: int) -> Any:
        if value is None or depth > self._max_depth:
            return value
        if isinstance(value, (list, tuple)):
            return [self._with_dto(entry, dto, depth + 1) for entry in value]
        meta = self._registry.get(dto)
        if meta is None:
            return value
        return self._object(value, {name: f.schema for name, f in meta.fields.items()}, depth)

    def _with_schema(self, value: Any, node: SchemaNode, depth: int) -> Any:
        if value is None or depth > self._max_depth:
            return value
        if isinstance(node, StringNode):
            return _string(value, node.format)
        if isinstance(node, ArrayNode):
            if not isinstance(value, (list, tuple)):
                return value
            return self._guarded(value, lambda: [self._with_schema(entry, node.items, depth + 1) for entry in value])
        if isinstance(node, ObjectNode):
            return self._object(value, node.properties, depth)
        if isinstance(node, RecordNode):
            source = _as_mapping(value)
            if source is None:
                return value
            return self._guarded(
                value, lambda: {k: self._with_schema(v, node.values, depth + 1) for k, v in source.items()}
            )
        if isinstance(node, RefNode):
            return self._with_dto(value, node.dto, depth)
        if isinstance(node, UnionNode):
            for option in node.any_of:
                serialized = self._with_schema(value, option, depth)
                if serialized is not value:
                    return serialized
            return value
        return value

    def _object(self, value: Any, properties: Mapping[str, SchemaNode], depth: int) -> Any:
        source = _as_mapping(value)
        if source is None:
            return value

        def build() -> dict[str, Any]:
            output = dict(source)
            for key, schema in properties.items():
                if key in source:
                    output[key] = self._with_schema(source[key], schema, depth + 1)
            return output

        return self._guarded(value, build)

    def _guarded(self, value: Any, build: Callable[[], Any]) -> Any:
        marker = id(value)
        if marker in self._active:
            return value
        self._active.add(marker)
        try:
            return build()
        finally:
            self._active.discard(marker)


def _string(value: Any, fmt: str | None) -> Any:
    if fmt == "byte" and is_bytes_like(value):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dt.date):
        if fmt == "date":
            return format_date(value)
        if fmt == "date-time":
            return format_date_time(value)
    return value


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    """View value as a key/value object, or None if it is not object-like."""
    if isinstance(value, Mapping):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    return None
