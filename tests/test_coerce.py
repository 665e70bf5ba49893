"""Tests for textual input coercion."""

from __future__ import annotations

import datetime as dt

import pytest

from dtoschema.coerce import coerce_input, normalize_single, parse_boolean, parse_id, parse_integer, parse_number
from dtoschema.config import Config
from dtoschema.registry import DtoRegistry, define_dto
from dtoschema.schema import nodes as t


# === Single values ===


class TestNormalizeSingle:
    def test_first_list_element(self) -> None:
        assert normalize_single(["a", "b"]) == "a"
        assert normalize_single([]) is None

    def test_trim_and_empty(self) -> None:
        assert normalize_single("  x ") == "x"
        assert normalize_single("  x ", trim=False) == "  x "
        assert normalize_single("   ") is None
        assert normalize_single("   ", empty="allow") == ""

    def test_non_strings(self) -> None:
        assert normalize_single(True) == "true"
        assert normalize_single(12) == "12"
        assert normalize_single(None) is None

    def test_integers_without_a_text_form(self) -> None:
        assert normalize_single(10**5000) is None


class TestParseNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("42", 42),
            (" -7 ", -7),
            ("3.5", 3.5),
            ("1e3", 1000.0),
            ("0x1A", 26),
            ("0b101", 5),
            (["8", "9"], 8),
        ],
    )
    def test_readable(self, value: object, expected: float) -> None:
        assert parse_number(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "12abc", "Infinity", "1e400", "NaN", None])
    def test_unreadable(self, value: object) -> None:
        assert parse_number(value) is None

    def test_integer_literals_stay_int(self) -> None:
        assert isinstance(parse_number("42"), int)
        assert isinstance(parse_number("42.0"), float)

    def test_range(self) -> None:
        assert parse_number("5", min=10) is None
        assert parse_number("5", min=10, clamp=True) == 10
        assert parse_number("5", max=3, clamp=True) == 3

    def test_oversized_literals(self) -> None:
        assert parse_number("1" * 5000) is None
        assert parse_number("1" * 5000, max=10, clamp=True) is None
        assert parse_number("0x" + "f" * 5000) == 16**5000 - 1

    def test_only_ascii_digits(self) -> None:
        assert parse_number("\u0661\u0662\u0663") is None
        assert parse_number("\uff11.5") is None


class TestParseInteger:
    def test_integral_values(self) -> None:
        assert parse_integer("10") == 10
        assert parse_integer("10.0") == 10
        assert parse_integer("10.5") is None

    def test_clamp(self) -> None:
        assert parse_integer("150", max=100, clamp=True) == 100
        assert parse_integer("150", max=100) is None

    def test_oversized_and_non_ascii_digits(self) -> None:
        assert parse_integer("1" * 5000) is None
        assert parse_integer("-" + "9" * 5000, min=0, clamp=True) is None
        assert parse_integer("\u0661\u0662\u0663") is None

    def test_parse_id(self) -> None:
        assert parse_id("7") == 7
        assert parse_id("0") is None
        assert parse_id("-3") is None
        assert parse_id("0", min=0) == 0


class TestParseBoolean:
    def test_defaults(self) -> None:
        assert parse_boolean("true") is True
        assert parse_boolean(" TRUE ") is True
        assert parse_boolean("0") is False
        assert parse_boolean("yes") is None
        assert parse_boolean("") is None

    def test_custom_values(self) -> None:
        assert parse_boolean("yes", true_values=["yes"], false_values=["no"]) is True
        assert parse_boolean("NO", true_values=["yes"], false_values=["no"]) is False
        assert parse_boolean("NO", true_values=["yes"], false_values=["no"], case_sensitive=True) is None


# === Schema-driven ===


class TestCoerceInput:
    def test_query_object(self, registry: DtoRegistry) -> None:
        schema = t.object_(
            {
                "page": t.integer(),
                "ratio": t.number(),
                "active": t.boolean(),
                "ids": t.array(t.integer()),
                "name": t.string(),
            }
        )
        query = {"page": "2", "ratio": "0.5", "active": "false", "ids": ["1", "2"], "name": " Ada ", "extra": "x"}
        assert coerce_input(query, schema, registry) == {
            "page": 2,
            "ratio": 0.5,
            "active": False,
            "ids": [1, 2],
            "name": " Ada ",
            "extra": "x",
        }

    def test_unreadable_values_pass_through(self, registry: DtoRegistry) -> None:
        schema = t.object_({"page": t.integer(), "flag": t.boolean()})
        assert coerce_input({"page": "two", "flag": "maybe"}, schema, registry) == {"page": "two", "flag": "maybe"}

    def test_single_value_under_array(self, registry: DtoRegistry) -> None:
        assert coerce_input("3", t.array(t.integer()), registry) == [3]

    def test_primitives_off(self, registry: DtoRegistry) -> None:
        assert coerce_input({"page": "2"}, t.object_({"page": t.integer()}), registry, primitives=False) == {"page": "2"}
        assert coerce_input("3", t.array(t.integer()), registry, primitives=False) == "3"

    def test_enum_and_literal(self, registry: DtoRegistry) -> None:
        assert coerce_input("2", t.enum([1, 2, 3]), registry) == 2
        assert coerce_input("true", t.literal(True), registry) is True
        assert coerce_input("b", t.enum(["a", "b"]), registry) == "b"
        assert coerce_input("9", t.enum([1, 2]), registry) == "9"

    def test_union_takes_first_conversion(self, registry: DtoRegistry) -> None:
        assert coerce_input("5", t.union(t.integer(), t.string()), registry) == 5
        assert coerce_input("x", t.union(t.integer(), t.string()), registry) == "x"

    def test_dates_are_opt_in(self, registry: DtoRegistry) -> None:
        assert coerce_input("2024-01-02", t.date(), registry) == "2024-01-02"
        assert coerce_input("2024-01-02", t.date(), registry, dates=True) == dt.date(2024, 1, 2)
        config = Config({"coercion": {"dates": True}})
        assert coerce_input("2024-01-02T03:04:05Z", t.date_time(), registry, config=config) == dt.datetime(
            2024, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc
        )
        assert coerce_input("nope", t.date(), registry, dates=True) == "nope"

    def test_empty_policy_from_config(self, registry: DtoRegistry) -> None:
        schema = t.object_({"n": t.integer()})
        assert coerce_input({"n": ""}, schema, registry) == {"n": ""}

    def test_dto_source(self, registry: DtoRegistry) -> None:
        query = define_dto(registry, "Query", {"page": t.optional(t.integer())})
        assert coerce_input({"page": "4"}, query, registry) == {"page": 4}
        assert coerce_input({"page": "4"}, type("Ghost", (), {}), registry) == {"page": "4"}

    def test_cyclic_input(self, registry: DtoRegistry, node_dto: type) -> None:
        root: dict = {"value": "1", "children": []}
        root["children"].append(root)
        result = coerce_input(root, node_dto, registry)
        assert result["value"] == 1
        assert result["children"][0] is root

    def test_nesting_beyond_max_depth_is_left_unchanged(self, registry: DtoRegistry, node_dto: type) -> None:
        leaf = {"value": "3", "children": []}
        tree = {"value": "1", "children": [{"value": "2", "children": [leaf]}]}
        result = coerce_input(tree, node_dto, registry, config=Config({"validation": {"max_depth": 3}}))
        assert result["value"] == 1
        assert result["children"][0]["value"] == 2
        assert result["children"][0]["children"][0] is leaf

    def test_deeply_nested_input(self, registry: DtoRegistry, node_dto: type) -> None:
        tree: dict = {"value": "0", "children": []}
        for _ in range(3000):
            tree = {"value": "1", "children": [tree]}
        result = coerce_input(tree, node_dto, registry)
        assert result["value"] == 1
        assert result["children"][0]["value"] == 1
        deepest = result
        while deepest["children"]:
            deepest = deepest["children"][0]
        assert deepest["value"] == "0"
