"""Shared pytest fixtures for registry tests."""

from __future__ import annotations

import pytest

from dtoschema.registry import DtoRegistry, define_dto
from dtoschema.schema import nodes as t


@pytest.fixture
def article_dto(registry: DtoRegistry) -> type:
    return define_dto(
        registry,
        "Article",
        {
            "id": t.integer(),
            "title": t.string(min_length=1, max_length=120),
            "body": t.string(),
            "tags": t.optional(t.array(t.string())),
            "publishedAt": t.nullable(t.date_time()),
        },
        description="A published article",
        additional_properties=False,
    )
