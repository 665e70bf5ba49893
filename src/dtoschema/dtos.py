"""Ready-made DTOs for error responses and paged listings."""

from __future__ import annotations

import math
from typing import Any, Mapping, Sequence

from dtoschema.filters import FilterMapping
from dtoschema.registry.declare import define_dto, field
from dtoschema.registry.registry import DtoRegistry
from dtoschema.schema import nodes as t
from dtoschema.schema.types import FieldMeta

__all__ = [
    "create_error_dto",
    "create_paged_query_dto",
    "create_paged_filter_query_dto",
    "create_paged_response_dto",
    "build_paged_response",
]


def create_error_dto(
    registry: DtoRegistry,
    *,
    with_details: bool = True,
    include_trace_id: bool = True,
    name: str | None = None,
) -> type:
    """Register the DTO describing the JSON error envelope.

    With details the shape is ``{message, code?, errors?: [{field, message}], traceId?}``.
    """
    fields: dict[str, t.SchemaNode | FieldMeta] = {"message": t.string()}
    if with_details:
        detail = define_dto(
            registry,
            f"{name}Detail" if name else "ErrorDetailDto",
            {"field": t.string(), "message": t.string()},
        )
        fields["code"] = t.optional(t.string())
        fields["errors"] = t.optional(t.array(t.ref(detail)))
    if include_trace_id:
        fields["traceId"] = t.optional(t.string())

    default_name = "ErrorDto" if with_details else ("SimpleErrorDto" if include_trace_id else "BasicErrorDto")
    return define_dto(registry, name or default_name, fields)


def _paging_fields(default_page_size: int, max_page_size: int) -> dict[str, FieldMeta]:
    return {
        "page": field(t.optional(t.integer(minimum=1, default=1))),
        "pageSize": field(t.optional(t.integer(minimum=1, maximum=max_page_size, default=default_page_size))),
    }


def create_paged_query_dto(
    registry: DtoRegistry,
    *,
    default_page_size: int = 25,
    max_page_size: int = 100,
    name: str | None = None,
) -> type:
    return define_dto(registry, name or "PagedQueryDto", _paging_fields(default_page_size, max_page_size))


def create_paged_filter_query_dto(
    registry: DtoRegistry,
    filters: Mapping[str, FilterMapping | t.SchemaNode | None],
    *,
    default_page_size: int = 25,
    max_page_size: int = 100,
    name: str | None = None,
) -> type:
    """Paging fields plus one optional field per filter query key.

    A filter's own schema is used when it has one, otherwise a non-empty string.
    """
    fields = _paging_fields(default_page_size, max_page_size)
    for key, spec in filters.items():
        schema = spec.schema if isinstance(spec, FilterMapping) else spec
        fields[key] = field(t.optional(schema or t.string(min_length=1)))
    return define_dto(registry, name or "PagedFilterQueryDto", fields)


def create_paged_response_dto(
    registry: DtoRegistry,
    item_dto: type,
    *,
    name: str | None = None,
    description: str | None = None,
) -> type:
    """Register ``{items, totalItems, page, pageSize, totalPages, hasNextPage, hasPrevPage}``."""
    item_name = registry.require(item_dto).name
    return define_dto(
        registry,
        name or f"Paged{item_name}Response",
        {
            "items": t.array(t.ref(item_dto)),
            "totalItems": t.integer(minimum=0),
            "page": t.integer(minimum=1),
            "pageSize": t.integer(minimum=1),
            "totalPages": t.integer(minimum=1),
            "hasNextPage": t.boolean(),
            "hasPrevPage": t.boolean(),
        },
        description=description or "Paged response.",
    )


def build_paged_response(items: Sequence[Any], total_items: int, page: int, page_size: int) -> dict[str, Any]:
    """Assemble a value matching ``create_paged_response_dto``."""
    total_pages = max(1, math.ceil(total_items / page_size)) if page_size > 0 else 1
    return {
        "items": list(items),
        "totalItems": total_items,
        "page": page,
        "pageSize": page_size,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }
