"""Shared test fixtures for the dtoschema test suite."""

from __future__ import annotations

import pytest

from dtoschema.registry import DtoRegistry, define_dto, field
from dtoschema.registry.declare import normalize_fields
from dtoschema.schema import nodes as t
from dtoschema.schema.types import DtoMeta


@pytest.fixture
def registry() -> DtoRegistry:
    """A fresh, empty registry per test."""
    return DtoRegistry()


@pytest.fixture
def user_dto(registry: DtoRegistry) -> type:
    """A small DTO with required, optional and nullable fields."""
    return define_dto(
        registry,
        "User",
        {
            "id": t.integer(minimum=1),
            "name": field(t.string(min_length=1), description="Display name"),
            "email": t.optional(t.email()),
            "nickname": t.nullable(t.string()),
        },
        description="A registered user",
    )


@pytest.fixture
def node_dto(registry: DtoRegistry) -> type:
    """A self-referencing tree DTO."""

    class Node:
        pass

    fields = normalize_fields({"value": t.integer(), "children": t.array(t.ref(Node))})
    registry.register(Node, DtoMeta(name="Node", fields=fields))
    return Node
