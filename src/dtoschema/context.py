"""Per-application schema context: registry, configuration and trace id."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from dtoschema.config import Config
from dtoschema.registry.registry import DtoRegistry

__all__ = ["SchemaContext"]


@dataclass
class SchemaContext:
    """Bundles what request-time operations need.

    One context usually lives for the whole application; ``for_request``
    derives a copy that carries a fresh trace id.
    """

    registry: DtoRegistry
    config: Config = field(default_factory=Config)
    trace_id: str | None = None

    @classmethod
    def create(cls, registry: DtoRegistry | None = None, config: Config | None = None) -> SchemaContext:
        """Create a new context with a generated UUID v4 trace_id."""
        return cls(
            registry=registry if registry is not None else DtoRegistry(),
            config=config if config is not None else Config(),
            trace_id=str(uuid.uuid4()),
        )

    def for_request(self, trace_id: str | None = None) -> SchemaContext:
        """Same registry and config, new trace id (generated unless given)."""
        return SchemaContext(
            registry=self.registry,
            config=self.config,
            trace_id=trace_id or str(uuid.uuid4()),
        )
