"""dtoschema registry: DTO declaration, storage and derivation.

Usage::

    from dtoschema.registry import DtoRegistry, define_dto, pick_dto
    from dtoschema.schema import nodes as t

    registry = DtoRegistry()
    User = define_dto(registry, "User", {"id": t.integer(), "name": t.string()})
    UserSummary = pick_dto(registry, User, ["id"])
"""

from __future__ import annotations

from dtoschema.registry.declare import define_dto, dto, field
from dtoschema.registry.derive import FieldOverride, Patch, Replace, merge_dto, omit_dto, partial_dto, pick_dto
from dtoschema.registry.registry import DtoRegistry

__all__ = [
    "DtoRegistry",
    "define_dto",
    "dto",
    "field",
    "FieldOverride",
    "Patch",
    "Replace",
    "omit_dto",
    "pick_dto",
    "partial_dto",
    "merge_dto",
]
