"""Tests for the schema node factories and modifiers."""

from __future__ import annotations

import dataclasses

import pytest

from dtoschema.schema import nodes as t
from dtoschema.schema.nodes import MISSING, UNSET


class TestFactories:
    def test_kinds(self) -> None:
        assert t.string().kind == "string"
        assert t.integer().kind == "integer"
        assert t.number().kind == "number"
        assert t.boolean().kind == "boolean"
        assert t.null().kind == "null"
        assert t.literal("x").kind == "literal"
        assert t.enum(["a"]).kind == "enum"
        assert t.array(t.string()).kind == "array"
        assert t.object_().kind == "object"
        assert t.record(t.string()).kind == "record"
        assert t.union(t.string(), t.null()).kind == "union"
        assert t.any_().kind == "any"

    def test_format_shortcuts(self) -> None:
        assert t.uuid().format == "uuid"
        assert t.email().format == "email"
        assert t.date().format == "date"
        assert t.date_time().format == "date-time"
        assert t.byte().format == "byte"
        assert t.bytes_ is t.byte

    def test_base_options_pass_through(self) -> None:
        node = t.string(description="Name", title="Full name", examples=("Ada",), default="x", deprecated=True)
        assert node.description == "Name"
        assert node.title == "Full name"
        assert node.examples == ("Ada",)
        assert node.default == "x"
        assert node.deprecated is True

    def test_defaults(self) -> None:
        node = t.string()
        assert node.optional is False
        assert node.nullable is False
        assert node.default is UNSET

    def test_union_accepts_a_list(self) -> None:
        members = [t.string(), t.integer()]
        assert t.union(members).any_of == tuple(members)
        assert t.union(*members).any_of == tuple(members)

    def test_enum_stores_tuple(self) -> None:
        assert t.enum(["a", "b"]).values == ("a", "b")

    def test_factories_do_not_check_options(self) -> None:
        node = t.integer(minimum=10, maximum=1)
        assert (node.minimum, node.maximum) == (10, 1)


class TestImmutability:
    def test_nodes_are_frozen(self) -> None:
        node = t.string()
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.min_length = 3  # type: ignore[misc]

    def test_object_properties_are_read_only(self) -> None:
        props = {"a": t.string()}
        node = t.object_(props)
        props["b"] = t.integer()
        assert list(node.properties) == ["a"]
        with pytest.raises(TypeError):
            node.properties["c"] = t.string()  # type: ignore[index]

    def test_modifiers_return_copies(self) -> None:
        base = t.string(min_length=1)
        opt = t.optional(base)
        nul = t.nullable(base)
        assert opt is not base and opt.optional and not base.optional
        assert nul.nullable and not base.nullable
        assert opt.min_length == 1


class TestSentinels:
    def test_sentinels_are_falsy_and_distinct(self) -> None:
        assert not UNSET
        assert not MISSING
        assert UNSET is not MISSING
        assert repr(MISSING) == "MISSING"

    def test_is_schema_node(self) -> None:
        assert t.is_schema_node(t.string())
        assert not t.is_schema_node(str)
