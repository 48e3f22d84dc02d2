"""Registry of configuration modules discovered at startup."""

from __future__ import annotations

import structlog

from layerconf.models.config import ModuleMetadata
from layerconf.utils.logging import get_logger


class SchemaRegistry:
    """Holds the :class:`ModuleMetadata` of every registered key.

    Written once during discovery and read-only afterwards.  The first
    registration of a key wins; later ones are logged and ignored.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._modules: dict[str, ModuleMetadata] = {}
        self._logger = logger or get_logger(__name__)

    def register(self, metadata: ModuleMetadata) -> bool:
        """Register *metadata*; return ``False`` if its key is already taken.

        Raises:
            ValueError: If the key is not a non-empty string.
        """
        key = validate_config_key(metadata.key)
        existing = self._modules.get(key)
        if existing is not None:
            self._logger.warning(
                "duplicate_config_key",
                key=key,
                registered_by=_describe(existing.target),
                ignored=_describe(metadata.target),
            )
            return False

        self._modules[key] = metadata
        self._logger.debug("config_module_registered", key=key, target=_describe(metadata.target))
        return True

    def get(self, key: str) -> ModuleMetadata | None:
        return self._modules.get(key)

    def has(self, key: str) -> bool:
        return key in self._modules

    def keys(self) -> list[str]:
        return list(self._modules)

    def __len__(self) -> int:
        return len(self._modules)


def validate_config_key(key: object) -> str:
    """Return *key* unchanged if it is a non-empty string.

    Raises:
        ValueError: For any other value.
    """
    if not isinstance(key, str) or not key:
        raise ValueError(f"configuration key must be a non-empty string, got {key!r}")
    return key


def _describe(target: object) -> str | None:
    if target is None:
        return None
    return getattr(target, "__qualname__", None) or repr(target)
