"""Event bus providers."""

from layerconf.providers.event.memory_event_bus import InMemoryEventBus

__all__ = ["InMemoryEventBus"]
