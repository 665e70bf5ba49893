"""Error hierarchy for the dtoschema package."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "DtoSchemaError",
    "ConfigNotFoundError",
    "ConfigError",
    "InvalidInputError",
    "DtoNotFoundError",
    "DtoAlreadyRegisteredError",
    "ComponentNameCollisionError",
    "SchemaValidationError",
    "RequestValidationError",
    "ErrorCodes",
]


class DtoSchemaError(Exception):
    """Base error for all dtoschema errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
        trace_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.trace_id = trace_id
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigNotFoundError(DtoSchemaError):
    """Raised when a configuration file cannot be found."""

    def __init__(self, config_path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_NOT_FOUND",
            message=f"Configuration file not found: {config_path}",
            details={"config_path": config_path},
            **kwargs,
        )


class ConfigError(DtoSchemaError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="CONFIG_INVALID", message=message, **kwargs)


class InvalidInputError(DtoSchemaError):
    """Raised when a declaration receives unusable arguments."""

    def __init__(self, message: str = "Invalid input", **kwargs: Any) -> None:
        super().__init__(code="GENERAL_INVALID_INPUT", message=message, **kwargs)


class DtoNotFoundError(DtoSchemaError):
    """Raised when a DTO identity has no registry entry."""

    def __init__(self, dto: Any, **kwargs: Any) -> None:
        name = getattr(dto, "__name__", repr(dto))
        super().__init__(
            code="DTO_NOT_FOUND",
            message=f"DTO not registered: {name}",
            details={"dto": name},
            **kwargs,
        )


class DtoAlreadyRegisteredError(DtoSchemaError):
    """Raised on a second registration of the same DTO identity."""

    def __init__(self, dto: Any, **kwargs: Any) -> None:
        name = getattr(dto, "__name__", repr(dto))
        super().__init__(
            code="DTO_ALREADY_REGISTERED",
            message=f"DTO already registered: {name}",
            details={"dto": name},
            **kwargs,
        )


class ComponentNameCollisionError(DtoSchemaError):
    """Raised when two distinct DTOs would share one OpenAPI component name."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(
            code="COMPONENT_NAME_COLLISION",
            message=f"Two different DTOs are named '{name}'; give one of them a distinct name",
            details={"name": name},
            **kwargs,
        )

    @property
    def name(self) -> str:
        """The colliding component name."""
        return self.details["name"]


class SchemaValidationError(DtoSchemaError):
    """Raised when a caller turns a failed validation result into an exception."""

    def __init__(
        self,
        message: str = "Schema validation failed",
        errors: list[dict[str, Any]] | None = None,
        code: str = "SCHEMA_VALIDATION_ERROR",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            details={"errors": errors or []},
            **kwargs,
        )

    @property
    def errors(self) -> list[dict[str, Any]]:
        """The individual issues as plain dicts."""
        return self.details["errors"]


class RequestValidationError(SchemaValidationError):
    """Raised at the request boundary when body, query or params are invalid."""

    status = 400

    def __init__(
        self,
        errors: list[dict[str, Any]] | None = None,
        message: str = "Validation failed",
        **kwargs: Any,
    ) -> None:
        super().__init__(message=message, errors=errors, code="VALIDATION_FAILED", **kwargs)

    def to_envelope(self) -> Any:
        """Build the JSON error envelope for this error."""
        from dtoschema.envelope import ErrorDetail, ErrorEnvelope

        return ErrorEnvelope(
            message=self.message,
            code=self.code,
            errors=[ErrorDetail(field=e["field"], message=e["message"]) for e in self.errors] or None,
            trace_id=self.trace_id,
        )


class ErrorCodes:
    """All dtoschema error codes as constants.

    Example:
        if error.code == ErrorCodes.DTO_NOT_FOUND:
            handle_missing_dto()
    """

    CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
    CONFIG_INVALID = "CONFIG_INVALID"
    GENERAL_INVALID_INPUT = "GENERAL_INVALID_INPUT"
    DTO_NOT_FOUND = "DTO_NOT_FOUND"
    DTO_ALREADY_REGISTERED = "DTO_ALREADY_REGISTERED"
    COMPONENT_NAME_COLLISION = "COMPONENT_NAME_COLLISION"
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
