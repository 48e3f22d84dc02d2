"""In-process publish/subscribe bus with callback-based subscribers.

Subscribers are keyed by topic so unrelated notifications never reach each
other.

# ─── HOW NOTIFICATION WORKS ────────────────────────────────────────────
#
#   ConfigService ──publish()──→ InMemoryEventBus ──callback()──→ subscriber
#                                                 ──→ (any other subscriber)
#
#   - Subscriber errors are caught and logged; delivery continues with the
#     next subscriber
#   - Both sync and async callbacks are supported (asyncio.iscoroutine check)
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from layerconf.interfaces.event_publisher import IEventPublisher
from layerconf.utils.logging import get_logger


class InMemoryEventBus(IEventPublisher):
    """Topic-keyed event bus delivering payloads to registered callbacks."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._subscribers: dict[str, list[Callable]] = {}
        self._logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def publish(self, topic: str, payload: Any) -> None:
        """Deliver *payload* to every subscriber of *topic*, in subscription order."""
        subscribers = list(self._subscribers.get(topic, []))
        self._logger.debug("event_published", topic=topic, subscribers=len(subscribers))

        for callback in subscribers:
            try:
                result = callback(payload)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "subscriber_callback_error",
                    topic=topic,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )

    def subscribe(self, topic: str, callback: Callable) -> None:
        """Register *callback* for *topic*.

        Parameters
        ----------
        topic:
            The topic to listen to.
        callback:
            An async or sync callable accepting the payload.  Registering
            the same callback twice is a no-op.
        """
        callbacks = self._subscribers.setdefault(topic, [])
        if callback not in callbacks:
            callbacks.append(callback)
            self._logger.debug(
                "subscriber_registered",
                topic=topic,
                total_subscribers=len(callbacks),
            )

    def unsubscribe(self, topic: str, callback: Callable) -> None:
        """Remove a previously registered callback (no-op if absent)."""
        callbacks = self._subscribers.get(topic, [])
        if callback in callbacks:
            callbacks.remove(callback)
            self._logger.debug(
                "subscriber_unregistered",
                topic=topic,
                remaining_subscribers=len(callbacks),
            )
