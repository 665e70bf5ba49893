"""OpenAPI 3.1 generation and export."""

from __future__ import annotations

from dtoschema.openapi.export import export_openapi, write_openapi
from dtoschema.openapi.generator import (
    OpenApiGenerator,
    OpenApiInfo,
    OpenApiServer,
    ResponseSpec,
    RouteSpec,
    SchemaBuildContext,
)

__all__ = [
    "OpenApiGenerator",
    "OpenApiInfo",
    "OpenApiServer",
    "ResponseSpec",
    "RouteSpec",
    "SchemaBuildContext",
    "export_openapi",
    "write_openapi",
]
