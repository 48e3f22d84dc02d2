"""Pydantic-backed schema validation for merged configuration objects."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from layerconf.interfaces.schema_validator import ISchemaValidator
from layerconf.utils.errors import ConfigValidationError
from layerconf.utils.logging import get_logger


class PydanticSchemaValidator(ISchemaValidator):
    """Validates with pydantic v2.

    Accepted schemas: a ``BaseModel`` subclass, a ``TypeAdapter``, or any
    type ``TypeAdapter`` understands (TypedDict, dataclass, ``dict[str, int]``).
    Field defaults declared by the schema fill the gaps the merge left.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._logger = logger or get_logger(__name__)
        self._adapters: dict[Any, TypeAdapter] = {}

    def validate(self, key: str, data: Any, schema: Any) -> Any:
        try:
            if isinstance(schema, type) and issubclass(schema, BaseModel):
                return schema.model_validate(data)
            return self._adapter_for(schema).validate_python(data)
        except ValidationError as exc:
            details = format_validation_errors(exc)
            self._logger.error("config_validation_failed", key=key, details=details)
            raise ConfigValidationError(key, details) from exc

    def _adapter_for(self, schema: Any) -> TypeAdapter:
        if isinstance(schema, TypeAdapter):
            return schema
        try:
            adapter = self._adapters.get(schema)
        except TypeError:
            # Unhashable schema objects are not cached.
            return TypeAdapter(schema)
        if adapter is None:
            adapter = TypeAdapter(schema)
            self._adapters[schema] = adapter
        return adapter


def format_validation_errors(exc: ValidationError) -> str:
    """Render every error as ``[path.to.field] message``, comma-separated."""
    return ", ".join(
        f"[{'.'.join(str(part) for part in error['loc'])}] {error['msg']}"
        for error in exc.errors()
    )
