"""OpenAPI 3.1 document generation from schema nodes, DTOs and route descriptions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union

from pydantic import BaseModel, ConfigDict

from dtoschema.config import Config, OpenApiSettings
from dtoschema.errors import ComponentNameCollisionError, InvalidInputError
from dtoschema.registry.registry import DtoRegistry
from dtoschema.schema.nodes import (
    UNSET,
    ArrayNode,
    EnumNode,
    LiteralNode,
    NumberNode,
    ObjectNode,
    RecordNode,
    RefNode,
    SchemaNode,
    StringNode,
    UnionNode,
)
from dtoschema.schema.types import DtoMeta

logger = logging.getLogger(__name__)

__all__ = [
    "OpenApiGenerator",
    "OpenApiInfo",
    "OpenApiServer",
    "ResponseSpec",
    "RouteSpec",
    "SchemaBuildContext",
    "join_paths",
    "express_path_to_openapi",
]

SchemaSource = Union[SchemaNode, type]
JsonSchema = dict[str, Any]

COMPONENT_PREFIX = "#/components/schemas/"

_HTTP_METHODS = frozenset({"get", "put", "post", "delete", "options", "head", "patch", "trace"})
_EXPRESS_PARAM_RE = re.compile(r":([A-Za-z0-9_]+)")
_PYTHON_JSON_TYPES: tuple[tuple[type, str], ...] = (
    (bool, "boolean"),
    (int, "integer"),
    (float, "number"),
    (str, "string"),
)


class OpenApiInfo(BaseModel):
    """The document's ``info`` object."""

    model_config = ConfigDict(extra="allow")

    title: str
    version: str
    description: str | None = None


class OpenApiServer(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    description: str | None = None


@dataclass(frozen=True)
class ResponseSpec:
    """One documented response of a route."""

    status: int | str = 200
    description: str | None = None
    schema: SchemaSource | None = None
    content_type: str = "application/json"


@dataclass(frozen=True)
class RouteSpec:
    """Description of one HTTP operation.

    ``params``, ``query`` and ``headers`` are object nodes or DTOs whose
    fields become parameters; ``body`` is any schema source.
    """

    method: str
    path: str
    base_path: str = ""
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    tags: Sequence[str] | None = None
    params: SchemaSource | None = None
    query: SchemaSource | None = None
    headers: SchemaSource | None = None
    body: SchemaSource | None = None
    body_required: bool = True
    body_content_type: str = "application/json"
    responses: Sequence[ResponseSpec] = ()
    deprecated: bool | None = None


class SchemaBuildContext:
    """Converts schema sources to JSON Schema and collects DTO components.

    Each DTO identity is emitted once under ``components.schemas[<name>]``;
    every other occurrence, including recursive ones, becomes a ``$ref``.
    """

    def __init__(self, registry: DtoRegistry) -> None:
        self._registry = registry
        self.components: dict[str, JsonSchema] = {}
        self._owners: dict[str, type] = {}
        self._seen: set[type] = set()

    def schema_for(self, source: SchemaSource) -> JsonSchema:
        if isinstance(source, SchemaNode):
            return self.build_node(source)
        return self.ref_for(source)

    def ref_for(self, dto: type) -> JsonSchema:
        name = self.ensure_component(dto)
        if name is None:
            return {}
        return {"$ref": f"{COMPONENT_PREFIX}{name}"}

    def ensure_component(self, dto: type) -> str | None:
        """Emit the component for dto if needed and return its name.

        Returns None for identities the registry does not know.

        Raises:
            ComponentNameCollisionError: If another identity already owns the name.
        """
        meta = self._registry.get(dto)
        if meta is None:
            logger.warning("OpenAPI schema references unregistered DTO %r; emitting an empty schema", dto)
            return None

        owner = self._owners.get(meta.name)
        if owner is not None and owner is not dto:
            raise ComponentNameCollisionError(meta.name)
        if dto in self._seen:
            return meta.name

        self._seen.add(dto)
        self._owners[meta.name] = dto
        # Reserve the slot first so parents precede the DTOs they reference.
        self.components[meta.name] = {}
        self.components[meta.name] = self._dto_schema(meta)
        logger.debug("Emitted component '%s'", meta.name)
        return meta.name

    def build_node(self, node: SchemaNode) -> JsonSchema:
        schema = self._build_kind(node)
        _apply_base_options(schema, node)
        return _apply_nullable(schema, node)

    def _dto_schema(self, meta: DtoMeta) -> JsonSchema:
        return self.build_node(meta.as_object_node())

    def _build_kind(self, node: SchemaNode) -> JsonSchema:
        if isinstance(node, StringNode):
            return _compact(
                {
                    "type": "string",
                    "format": node.format,
                    "minLength": node.min_length,
                    "maxLength": node.max_length,
                    "pattern": node.pattern,
                }
            )
        if isinstance(node, NumberNode):
            return _compact(
                {
                    "type": node.kind,
                    "minimum": node.minimum,
                    "maximum": node.maximum,
                    "exclusiveMinimum": node.exclusive_minimum,
                    "exclusiveMaximum": node.exclusive_maximum,
                    "multipleOf": node.multiple_of,
                }
            )
        if isinstance(node, ArrayNode):
            return _compact(
                {
                    "type": "array",
                    "items": self.build_node(node.items),
                    "minItems": node.min_items,
                    "maxItems": node.max_items,
                    "uniqueItems": node.unique_items or None,
                }
            )
        if isinstance(node, ObjectNode):
            return self._object(node)
        if isinstance(node, RecordNode):
            return {"type": "object", "additionalProperties": self.build_node(node.values)}
        if isinstance(node, EnumNode):
            return {"enum": list(node.values), **_infer_type(node.values)}
        if isinstance(node, LiteralNode):
            return {"const": node.value, **_infer_type((node.value,))}
        if isinstance(node, UnionNode):
            return {"anyOf": [self.build_node(member) for member in node.any_of]}
        if isinstance(node, RefNode):
            return self.ref_for(node.dto)
        if node.kind == "boolean":
            return {"type": "boolean"}
        if node.kind == "null":
            return {"type": "null"}
        return {}

    def _object(self, node: ObjectNode) -> JsonSchema:
        schema: JsonSchema = {
            "type": "object",
            "properties": {name: self.build_node(prop) for name, prop in node.properties.items()},
        }
        required = [name for name, prop in node.properties.items() if not prop.optional]
        if required:
            schema["required"] = required
        extra = node.additional_properties
        if isinstance(extra, SchemaNode):
            schema["additionalProperties"] = self.build_node(extra)
        elif extra is not None:
            schema["additionalProperties"] = extra
        if node.min_properties is not None:
            schema["minProperties"] = node.min_properties
        if node.max_properties is not None:
            schema["maxProperties"] = node.max_properties
        return schema


class OpenApiGenerator:
    """Builds OpenAPI 3.1 documents from route descriptions.

    Example::

        generator = OpenApiGenerator(registry)
        doc = generator.build(
            [RouteSpec("get", "/users/:id", params=UserParams, responses=[ResponseSpec(200, schema=UserDto)])],
            info={"title": "Users", "version": "1.0.0"},
        )
    """

    def __init__(self, registry: DtoRegistry, config: Config | None = None) -> None:
        self._registry = registry
        self._settings = (config or Config()).section("openapi", OpenApiSettings)

    def build(
        self,
        routes: Sequence[RouteSpec],
        info: OpenApiInfo | Mapping[str, Any],
        servers: Sequence[OpenApiServer | Mapping[str, Any]] | None = None,
        dtos: Sequence[type] = (),
    ) -> dict[str, Any]:
        """Assemble the document.

        Raises:
            InvalidInputError: If a route uses an unknown HTTP method.
            ComponentNameCollisionError: If two DTOs share a component name.
        """
        context = SchemaBuildContext(self._registry)
        if self._settings.include_all_dtos:
            for dto in self._registry.dtos:
                context.ensure_component(dto)
        for dto in dtos:
            context.ensure_component(dto)

        paths: dict[str, dict[str, Any]] = {}
        for route in routes:
            method = route.method.lower()
            if method not in _HTTP_METHODS:
                raise InvalidInputError(message=f"Unsupported HTTP method '{route.method}' for {route.path}")
            openapi_path = express_path_to_openapi(join_paths(route.base_path, route.path))
            paths.setdefault(openapi_path, {})[method] = self._operation(route, context)

        document: dict[str, Any] = {
            "openapi": self._settings.version,
            "jsonSchemaDialect": self._settings.json_schema_dialect,
            "info": _dump(info, OpenApiInfo),
        }
        if servers:
            document["servers"] = [_dump(server, OpenApiServer) for server in servers]
        document["paths"] = paths
        document["components"] = {"schemas": context.components}
        return document

    def _operation(self, route: RouteSpec, context: SchemaBuildContext) -> dict[str, Any]:
        operation: dict[str, Any] = {}
        if route.operation_id:
            operation["operationId"] = route.operation_id
        if route.summary:
            operation["summary"] = route.summary
        if route.description:
            operation["description"] = route.description
        if route.tags:
            operation["tags"] = list(route.tags)
        if route.deprecated is not None:
            operation["deprecated"] = route.deprecated

        parameters = [
            *self._parameters("path", route.params, context),
            *self._parameters("query", route.query, context),
            *self._parameters("header", route.headers, context),
        ]
        if parameters:
            operation["parameters"] = parameters

        if route.body is not None:
            operation["requestBody"] = {
                "required": route.body_required,
                "content": {route.body_content_type: {"schema": context.schema_for(route.body)}},
            }

        responses: dict[str, Any] = {}
        for response in route.responses:
            entry: dict[str, Any] = {"description": response.description or "OK"}
            if response.schema is not None:
                entry["content"] = {response.content_type: {"schema": context.schema_for(response.schema)}}
            responses[str(response.status)] = entry
        operation["responses"] = responses
        return operation

    def _parameters(
        self,
        location: str,
        source: SchemaSource | None,
        context: SchemaBuildContext,
    ) -> list[dict[str, Any]]:
        if source is None:
            return []
        parameters = []
        for name, schema, required, description in self._fields_of(source):
            parameter: dict[str, Any] = {
                "name": name,
                "in": location,
                "required": True if location == "path" else required,
            }
            if description:
                parameter["description"] = description
            parameter["schema"] = context.build_node(schema)
            parameters.append(parameter)
        return parameters

    def _fields_of(self, source: SchemaSource) -> list[tuple[str, SchemaNode, bool, str | None]]:
        if isinstance(source, ObjectNode):
            return [(name, prop, not prop.optional, prop.description) for name, prop in source.properties.items()]
        if isinstance(source, SchemaNode):
            return [("value", source, not source.optional, source.description)]
        meta = self._registry.get(source)
        if meta is None:
            logger.warning("Parameters reference unregistered DTO %r; no parameters emitted", source)
            return []
        return [
            (name, f.schema, not f.optional, f.description or f.schema.description)
            for name, f in meta.fields.items()
        ]


# ----- Helpers -----


def join_paths(base_path: str, route_path: str) -> str:
    """Join a base path and a route path with exactly one slash between them."""
    base = base_path.rstrip("/") if base_path else ""
    route = route_path.lstrip("/") if route_path else ""
    if not base and not route:
        return "/"
    if not base:
        return f"/{route}"
    if not base.startswith("/"):
        base = f"/{base}"
    if not route:
        return base
    return f"{base}/{route}"


def express_path_to_openapi(path: str) -> str:
    """Rewrite ``:name`` segments as ``{name}``."""
    return _EXPRESS_PARAM_RE.sub(r"{\1}", path)


def _compact(schema: JsonSchema) -> JsonSchema:
    return {key: value for key, value in schema.items() if value is not None}


def _apply_base_options(schema: JsonSchema, node: SchemaNode) -> None:
    if "$ref" in schema:
        # Siblings of $ref describe the referencing site, not the component.
        if node.description:
            schema["description"] = node.description
        return
    if node.description:
        schema["description"] = node.description
    if node.title:
        schema["title"] = node.title
    if node.default is not UNSET:
        schema["default"] = node.default
    if node.examples:
        schema["examples"] = list(node.examples)
    if node.deprecated is not None:
        schema["deprecated"] = node.deprecated
    if node.read_only is not None:
        schema["readOnly"] = node.read_only
    if node.write_only is not None:
        schema["writeOnly"] = node.write_only


def _apply_nullable(schema: JsonSchema, node: SchemaNode) -> JsonSchema:
    if not node.nullable:
        return schema
    kind = schema.get("type")
    if "$ref" in schema or kind is None:
        return {"anyOf": [schema, {"type": "null"}]}
    if isinstance(kind, str):
        return {**schema, "type": [kind, "null"]}
    types = list(kind)
    if "null" not in types:
        types.append("null")
    return {**schema, "type": types}


def _infer_type(values: Sequence[Any]) -> JsonSchema:
    types: list[str] = []
    for value in values:
        name = "null" if value is None else _json_type(value)
        if name is not None and name not in types:
            types.append(name)
    if "number" in types and "integer" in types:
        types.remove("integer")
    if not types:
        return {}
    return {"type": types[0]} if len(types) == 1 else {"type": types}


def _json_type(value: Any) -> str | None:
    for python_type, json_type in _PYTHON_JSON_TYPES:
        if isinstance(value, python_type):
            return json_type
    return None


def _dump(value: BaseModel | Mapping[str, Any], model: type[BaseModel]) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    return model.model_validate(dict(value)).model_dump(exclude_none=True)
