"""Shared pytest fixtures for schema system tests."""

from __future__ import annotations

import pytest

from dtoschema.config import Config
from dtoschema.registry import DtoRegistry
from dtoschema.schema.validator import SchemaValidator


@pytest.fixture
def validator(registry: DtoRegistry) -> SchemaValidator:
    """Returns a SchemaValidator over the per-test registry."""
    return SchemaValidator(registry)


@pytest.fixture
def shallow_validator(registry: DtoRegistry) -> SchemaValidator:
    """Returns a SchemaValidator that gives up below three levels of nesting."""
    return SchemaValidator(registry, Config({"validation": {"max_depth": 3}}))
