"""JSON error envelope returned for requests that fail validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = ["ErrorDetail", "ErrorEnvelope"]


class ErrorDetail(BaseModel):
    """One violated field."""

    field: str = Field(..., description="Dotted path of the offending field", examples=["items[0].name"])
    message: str = Field(..., description="Human readable problem", examples=["is required"])


class ErrorEnvelope(BaseModel):
    """Wire shape ``{message, code?, errors?, traceId?}``."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    code: str | None = None
    errors: list[ErrorDetail] | None = None
    trace_id: str | None = Field(default=None, alias="traceId")

    def to_dict(self) -> dict[str, Any]:
        """Dump with wire aliases, omitting absent keys."""
        return self.model_dump(by_alias=True, exclude_none=True)
