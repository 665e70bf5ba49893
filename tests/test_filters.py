"""Tests for filter, sort and pagination helpers."""

from __future__ import annotations

import pytest

from dtoschema.errors import InvalidInputError
from dtoschema.filters import (
    FilterMapping,
    Pagination,
    ParsedSort,
    create_filter_mappings,
    normalize_pagination,
    parse_filter,
    parse_sort,
)
from dtoschema.schema import nodes as t


class TestFilterMappings:
    def test_dict_and_tuple_entries(self) -> None:
        mappings = create_filter_mappings(
            [
                {"query_key": "q", "field": "name", "operator": "contains", "schema": t.string()},
                ("status", "status"),
                ("minPrice", "price", "gte"),
            ]
        )
        assert mappings["q"] == FilterMapping("name", "contains", t.string())
        assert mappings["status"] == FilterMapping("status")
        assert mappings["minPrice"] == FilterMapping("price", "gte")

    def test_field_defaults_to_query_key(self) -> None:
        assert create_filter_mappings([{"query_key": "status"}])["status"].field == "status"

    @pytest.mark.parametrize("entry", ["status", ("only",), {"field": "x"}, ("", "x")])
    def test_invalid_entries(self, entry: object) -> None:
        with pytest.raises(InvalidInputError):
            create_filter_mappings([entry])  # type: ignore[list-item]


class TestParseFilter:
    def test_nested_field(self) -> None:
        mappings = {"title": FilterMapping("posts.some.title", "contains")}
        assert parse_filter({"title": "Hello"}, mappings) == {"posts": {"some": {"title": {"contains": "Hello"}}}}

    def test_operators_share_a_field(self) -> None:
        mappings = create_filter_mappings([("min", "price", "gte"), ("max", "price", "lte")])
        assert parse_filter({"min": "1", "max": "9"}, mappings) == {"price": {"gte": "1", "lte": "9"}}

    def test_list_paths_and_bracket_paths(self) -> None:
        mappings = {"tag": FilterMapping(["tags", "some", "name"]), "author": FilterMapping("author[name]")}
        assert parse_filter({"tag": "py", "author": "Ada"}, mappings) == {
            "tags": {"some": {"name": {"equals": "py"}}},
            "author": {"name": {"equals": "Ada"}},
        }

    def test_relation_operators(self) -> None:
        mappings = {"postsEmpty": FilterMapping("posts", "isEmpty")}
        assert parse_filter({"postsEmpty": True}, mappings) == {"posts": {"isEmpty": True}}

    def test_unmapped_keys_are_ignored(self) -> None:
        mappings = {"name": FilterMapping("name", "contains")}
        assert parse_filter({"unknown": "value"}, mappings) is None

    def test_nested_query_keys(self) -> None:
        mappings = {"filter[status]": FilterMapping("status")}
        assert parse_filter({"filter": {"status": "open"}}, mappings) == {"status": {"equals": "open"}}

    def test_empty_values_are_skipped(self) -> None:
        mappings = create_filter_mappings([("a", "a"), ("b", "b"), ("c", "c"), ("d", "d")])
        assert parse_filter({"a": "", "b": None, "c": [], "d": 0}, mappings) == {"d": {"equals": 0}}

    def test_nothing_set(self) -> None:
        mappings = {"a": FilterMapping("a")}
        assert parse_filter({"a": ""}, mappings) is None
        assert parse_filter({}, mappings) is None
        assert parse_filter(None, mappings) is None


class TestParseSort:
    COLUMNS = {"name": "user.name", "created": "createdAt"}

    def test_requested_column(self) -> None:
        query = {"sortBy": "name", "sortDirection": "desc"}
        assert parse_sort(query, self.COLUMNS) == ParsedSort("name", "desc", "user.name")

    def test_falls_back_to_default(self) -> None:
        parsed = parse_sort({"sortBy": "password"}, self.COLUMNS, default_sort_by="created")
        assert parsed == ParsedSort("created", "asc", "createdAt")

    def test_invalid_direction_uses_default(self) -> None:
        parsed = parse_sort({"sortBy": "name", "sortDirection": "sideways"}, self.COLUMNS, default_sort_direction="desc")
        assert parsed is not None and parsed.sort_direction == "desc"

    def test_custom_keys(self) -> None:
        parsed = parse_sort({"order": " created ", "dir": "desc"}, self.COLUMNS, sort_by_key="order", sort_direction_key="dir")
        assert parsed == ParsedSort("created", "desc", "createdAt")

    def test_no_usable_column(self) -> None:
        assert parse_sort({"sortBy": "password"}, self.COLUMNS) is None
        assert parse_sort(None, self.COLUMNS) is None


class TestPagination:
    def test_reads_text(self) -> None:
        assert normalize_pagination("3", "20") == Pagination(page=3, page_size=20)
        assert normalize_pagination("12abc") == Pagination(page=12, page_size=10)

    def test_bounds(self) -> None:
        assert normalize_pagination(0, -5) == Pagination(page=1, page_size=1)
        assert normalize_pagination(1, 500, max_page_size=100).page_size == 100

    def test_fallbacks(self) -> None:
        result = normalize_pagination("x", None, default_page=2, default_page_size=25)
        assert result == Pagination(page=2, page_size=25)
        assert normalize_pagination(True, ["7"]).page_size == 7

    def test_oversized_numbers_fall_back(self) -> None:
        assert normalize_pagination("9" * 5000, "10") == Pagination(page=1, page_size=10)
        assert normalize_pagination("2", "9" * 5000, max_page_size=50) == Pagination(page=2, page_size=10)

    def test_only_ascii_digits_are_read(self) -> None:
        assert normalize_pagination("\u0663", "\u0662\u0660") == Pagination(page=1, page_size=10)

    def test_offset(self) -> None:
        assert Pagination(page=3, page_size=20).offset == 40
