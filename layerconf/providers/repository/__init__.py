"""Snapshot repository providers.

InMemoryConfigRepository is a dict-based store: fast but not shared across
processes.  Cross-process coordination is out of scope for the engine.
"""

from layerconf.providers.repository.memory_repository import InMemoryConfigRepository

__all__ = ["InMemoryConfigRepository"]
