"""Abstract base class for configuration loaders.

A loader turns a module's :class:`ModuleMetadata` into a validated value.
It is a pure function of its inputs at call time (files on disk, the
process environment, the metadata) and never touches shared state; storing
the result is the caller's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from layerconf.models.config import ModuleMetadata


class IConfigLoader(ABC):
    """Contract for the load pipeline of a single configuration module."""

    @abstractmethod
    async def load(self, metadata: ModuleMetadata) -> Any:
        """Resolve, merge and validate the configuration for *metadata*.

        Parameters
        ----------
        metadata:
            Registration record carrying the key and schema.

        Returns
        -------
        Any
            The schema-normalized configuration value.

        Raises
        ------
        ConfigValidationError
            If the merged data does not satisfy the schema.
        ConfigLoaderError
            On any other failure (unreadable file, timeout, ...).
        """

    @abstractmethod
    async def reload(self, key: str) -> Any | None:
        """Re-run :meth:`load` for a previously registered *key*.

        Returns ``None`` when *key* is not registered.  Errors propagate with
        the same semantics as :meth:`load`.
        """
