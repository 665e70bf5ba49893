"""Tests for the ready-made error and paging DTOs."""

from __future__ import annotations

from dtoschema.coerce import coerce_input
from dtoschema.dtos import (
    build_paged_response,
    create_error_dto,
    create_paged_filter_query_dto,
    create_paged_query_dto,
    create_paged_response_dto,
)
from dtoschema.errors import RequestValidationError
from dtoschema.filters import FilterMapping
from dtoschema.openapi import SchemaBuildContext
from dtoschema.registry import DtoRegistry
from dtoschema.schema import nodes as t
from dtoschema.schema.validator import SchemaValidator


class TestErrorDtos:
    def test_detailed_error_dto(self, registry: DtoRegistry) -> None:
        error_dto = create_error_dto(registry)
        meta = registry.require(error_dto)
        assert meta.name == "ErrorDto"
        assert list(meta.fields) == ["message", "code", "errors", "traceId"]
        assert [registry.require(d).name for d in registry.dtos] == ["ErrorDetailDto", "ErrorDto"]

    def test_envelope_matches_error_dto(self, registry: DtoRegistry) -> None:
        error_dto = create_error_dto(registry)
        error = RequestValidationError(errors=[{"field": "name", "message": "is required"}], trace_id="abc")
        envelope = error.to_envelope().to_dict()
        assert SchemaValidator(registry).validate(envelope, error_dto).valid

    def test_simple_variants(self, registry: DtoRegistry) -> None:
        simple = registry.require(create_error_dto(registry, with_details=False))
        basic = registry.require(create_error_dto(registry, with_details=False, include_trace_id=False))
        assert (simple.name, list(simple.fields)) == ("SimpleErrorDto", ["message", "traceId"])
        assert (basic.name, list(basic.fields)) == ("BasicErrorDto", ["message"])

    def test_custom_name(self, registry: DtoRegistry) -> None:
        create_error_dto(registry, name="ApiError")
        assert [registry.require(d).name for d in registry.dtos] == ["ApiErrorDetail", "ApiError"]


class TestPagedQuery:
    def test_bounds(self, registry: DtoRegistry) -> None:
        query_dto = create_paged_query_dto(registry, max_page_size=50)
        validator = SchemaValidator(registry)
        coerced = coerce_input({"page": "0", "pageSize": "80"}, query_dto, registry)
        messages = [(e.field, e.message) for e in validator.validate(coerced, query_dto).errors]
        assert messages == [("page", "must be at least 1"), ("pageSize", "must be at most 50")]
        assert validator.validate({}, query_dto).valid

    def test_defaults_are_documented(self, registry: DtoRegistry) -> None:
        query_dto = create_paged_query_dto(registry, default_page_size=20)
        context = SchemaBuildContext(registry)
        context.schema_for(query_dto)
        assert context.components["PagedQueryDto"]["properties"]["pageSize"] == {
            "type": "integer",
            "minimum": 1,
            "maximum": 100,
            "default": 20,
        }

    def test_filter_query_fields(self, registry: DtoRegistry) -> None:
        query_dto = create_paged_filter_query_dto(
            registry,
            {
                "title": FilterMapping("posts.some.title", "contains"),
                "status": t.enum(["draft", "published"]),
                "q": None,
            },
        )
        meta = registry.require(query_dto)
        assert list(meta.fields) == ["page", "pageSize", "title", "status", "q"]
        assert all(f.optional for f in meta.fields.values())
        assert meta.fields["title"].schema.min_length == 1
        assert meta.fields["status"].schema.kind == "enum"
        result = SchemaValidator(registry).validate({"status": "archived"}, query_dto)
        assert [e.field for e in result.errors] == ["status"]


class TestPagedResponse:
    def test_response_dto(self, registry: DtoRegistry, user_dto: type) -> None:
        paged = create_paged_response_dto(registry, user_dto)
        meta = registry.require(paged)
        assert meta.name == "PagedUserResponse"
        assert meta.description == "Paged response."
        users = [{"id": 1, "name": "Ada", "nickname": None}, {"id": 2, "name": "Grace", "nickname": "g"}]
        value = build_paged_response(users, total_items=2, page=1, page_size=10)
        assert SchemaValidator(registry).validate(value, paged).valid

    def test_invalid_items_are_reported(self, registry: DtoRegistry, user_dto: type) -> None:
        paged = create_paged_response_dto(registry, user_dto, name="UserPage")
        value = build_paged_response([{"id": 0, "name": "Ada", "nickname": None}], 1, 1, 10)
        result = SchemaValidator(registry).validate(value, paged)
        assert [(e.field, e.message) for e in result.errors] == [("items[0].id", "must be at least 1")]

    def test_build_paged_response(self) -> None:
        assert build_paged_response(["a"] * 10, total_items=25, page=2, page_size=10) == {
            "items": ["a"] * 10,
            "totalItems": 25,
            "page": 2,
            "pageSize": 10,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPrevPage": True,
        }

    def test_empty_listing_has_one_page(self) -> None:
        result = build_paged_response([], total_items=0, page=1, page_size=10)
        assert result["totalPages"] == 1
        assert result["hasNextPage"] is False
        assert result["hasPrevPage"] is False
