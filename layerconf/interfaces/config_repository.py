"""Abstract base class for configuration snapshot storage.

Defines the contract for the per-key snapshot store that backs the read API.
The default implementation keeps snapshots in a dict; any other backend must
preserve the same guarantees: ``save`` freezes the value and replaces the
stored snapshot in one step, and reads never block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from layerconf.models.config import ConfigSnapshot


class IConfigRepository(ABC):
    """Contract for key → :class:`ConfigSnapshot` storage.

    All operations are synchronous: readers are served from memory and must
    never wait on a reload in progress.
    """

    @abstractmethod
    def save(self, key: str, snapshot: ConfigSnapshot) -> ConfigSnapshot:
        """Deep-freeze *snapshot*'s value and store it under *key*.

        Parameters
        ----------
        key:
            The configuration key.
        snapshot:
            The snapshot to publish.  An existing snapshot for *key* is
            replaced wholesale.

        Returns
        -------
        ConfigSnapshot
            The snapshot as stored (with its value frozen).
        """

    @abstractmethod
    def get(self, key: str) -> ConfigSnapshot | None:
        """Return the snapshot stored under *key*, or ``None``.

        Parameters
        ----------
        key:
            The configuration key to look up.
        """

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return ``True`` if a snapshot is stored under *key*."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every key that currently has a snapshot."""
