"""Abstract base class for schema validators.

The engine never interprets a schema itself: it hands the merged raw object
and the module's schema to an injected validator, which either returns the
normalized value (declared defaults filled in, coercions applied) or raises
``ConfigValidationError`` listing every failing field.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ISchemaValidator(ABC):
    """Contract for validating a merged configuration object."""

    @abstractmethod
    def validate(self, key: str, data: Any, schema: Any) -> Any:
        """Validate *data* against *schema*.

        Parameters
        ----------
        key:
            The configuration key, used for error context.
        data:
            The merged raw object.
        schema:
            The schema registered for *key*.

        Returns
        -------
        Any
            The validated, schema-normalized value.

        Raises
        ------
        ConfigValidationError
            If *data* does not conform to *schema*.
        """
