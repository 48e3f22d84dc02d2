"""Abstract base class for the process-wide notification bus.

The configuration service publishes a :class:`ConfigUpdatedEvent` on the
``config.updated`` topic whenever a module is reloaded.  Anything that caches
state derived from configuration subscribes through whichever bus the host
application injects; ``InMemoryEventBus`` is the bundled default.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IEventPublisher(ABC):
    """Contract for fire-and-forget topic publication."""

    @abstractmethod
    async def publish(self, topic: str, payload: Any) -> None:
        """Deliver *payload* to every subscriber of *topic*.

        Parameters
        ----------
        topic:
            Topic name, e.g. ``"config.updated"``.
        payload:
            The event object.  Subscribers must treat it as read-only.
        """
