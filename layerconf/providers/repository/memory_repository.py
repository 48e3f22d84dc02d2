"""In-memory snapshot repository.

Simple, fast store suitable for single-process deployments.  Can be swapped
for another backend via the IConfigRepository interface.
"""

from __future__ import annotations

import structlog

from layerconf.interfaces.config_repository import IConfigRepository
from layerconf.models.config import ConfigSnapshot
from layerconf.utils.freeze import deep_freeze
from layerconf.utils.logging import get_logger


class InMemoryConfigRepository(IConfigRepository):
    """Dict-backed store of the latest snapshot per key.

    Only the latest snapshot is retained.  A replaced snapshot stays valid
    for callers that captured it earlier: reads are snapshot-isolated.

    Parameters
    ----------
    logger:
        Optional structlog logger; defaults to this module's logger.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._storage: dict[str, ConfigSnapshot] = {}
        self._logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # IConfigRepository implementation
    # ------------------------------------------------------------------

    def save(self, key: str, snapshot: ConfigSnapshot) -> ConfigSnapshot:
        """Freeze the snapshot's value, then replace the stored reference."""
        frozen = snapshot.model_copy(update={"value": deep_freeze(snapshot.value)})
        # Single dict assignment: readers see the old or the new snapshot, never a mix.
        self._storage[key] = frozen
        self._logger.debug("snapshot_saved", key=key, version=frozen.version)
        return frozen

    def get(self, key: str) -> ConfigSnapshot | None:
        """Return the snapshot for *key*, or ``None`` if nothing was saved."""
        return self._storage.get(key)

    def has(self, key: str) -> bool:
        """Return ``True`` if *key* has a snapshot."""
        return key in self._storage

    def keys(self) -> list[str]:
        """Return all keys with a snapshot, in insertion order."""
        return list(self._storage)
