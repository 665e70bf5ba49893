"""dtoschema - DTO schemas with validation, serialization and OpenAPI generation."""

from __future__ import annotations

# Schema
from dtoschema.schema import nodes as t
from dtoschema.schema import (
    MISSING,
    UNSET,
    DtoMeta,
    FieldMeta,
    SchemaNode,
    SchemaValidator,
    ValidationIssue,
    ValidationResult,
    serialize_response,
    validate,
)

# Registry
from dtoschema.registry import (
    DtoRegistry,
    Patch,
    Replace,
    define_dto,
    dto,
    field,
    merge_dto,
    omit_dto,
    partial_dto,
    pick_dto,
)

# Config
from dtoschema.config import Config

# Context
from dtoschema.context import SchemaContext

# Errors
from dtoschema.errors import (
    ComponentNameCollisionError,
    ConfigError,
    ConfigNotFoundError,
    DtoAlreadyRegisteredError,
    DtoNotFoundError,
    DtoSchemaError,
    ErrorCodes,
    InvalidInputError,
    RequestValidationError,
    SchemaValidationError,
)
from dtoschema.envelope import ErrorDetail, ErrorEnvelope

# Coercion
from dtoschema.coerce import coerce_input, normalize_single, parse_boolean, parse_id, parse_integer, parse_number

# Request boundary
from dtoschema.request import ValidatedRequest, validate_request

# Query helpers
from dtoschema.filters import (
    FilterMapping,
    ParsedSort,
    create_filter_mappings,
    normalize_pagination,
    parse_filter,
    parse_sort,
)
from dtoschema.dtos import (
    build_paged_response,
    create_error_dto,
    create_paged_filter_query_dto,
    create_paged_query_dto,
    create_paged_response_dto,
)

# OpenAPI
from dtoschema.openapi import OpenApiGenerator, ResponseSpec, RouteSpec, export_openapi

__version__ = "0.1.0"

__all__ = [
    # Schema
    "t",
    "MISSING",
    "UNSET",
    "DtoMeta",
    "FieldMeta",
    "SchemaNode",
    "SchemaValidator",
    "ValidationIssue",
    "ValidationResult",
    "serialize_response",
    "validate",
    # Registry
    "DtoRegistry",
    "Patch",
    "Replace",
    "define_dto",
    "dto",
    "field",
    "merge_dto",
    "omit_dto",
    "partial_dto",
    "pick_dto",
    # Config / context
    "Config",
    "SchemaContext",
    # Errors
    "ComponentNameCollisionError",
    "ConfigError",
    "ConfigNotFoundError",
    "DtoAlreadyRegisteredError",
    "DtoNotFoundError",
    "DtoSchemaError",
    "ErrorCodes",
    "InvalidInputError",
    "RequestValidationError",
    "SchemaValidationError",
    "ErrorDetail",
    "ErrorEnvelope",
    # Coercion
    "coerce_input",
    "normalize_single",
    "parse_boolean",
    "parse_id",
    "parse_integer",
    "parse_number",
    # Request boundary
    "ValidatedRequest",
    "validate_request",
    # Query helpers
    "FilterMapping",
    "ParsedSort",
    "create_filter_mappings",
    "normalize_pagination",
    "parse_filter",
    "parse_sort",
    "build_paged_response",
    "create_error_dto",
    "create_paged_filter_query_dto",
    "create_paged_query_dto",
    "create_paged_response_dto",
    # OpenAPI
    "OpenApiGenerator",
    "ResponseSpec",
    "RouteSpec",
    "export_openapi",
    # Version
    "__version__",
]
