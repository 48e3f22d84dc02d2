"""Public interface definitions for the engine's swappable collaborators.

Concrete adapters implement these abstract base classes and are injected at
construction time, so the storage backend, the schema language or the
notification bus can be replaced without touching the load pipeline.

CONCRETE PROVIDER MAP:
    Interface             →  Default implementation
    ─────────────────────────────────────────────────────────────────────
    IConfigRepository     →  InMemoryConfigRepository (providers/repository)
    IEventPublisher       →  InMemoryEventBus (providers/event)
    ISchemaValidator      →  PydanticSchemaValidator (services)
    IConfigLoader         →  ConfigLoadOrchestrator (pipeline)
"""

from layerconf.interfaces.config_loader import IConfigLoader
from layerconf.interfaces.config_repository import IConfigRepository
from layerconf.interfaces.event_publisher import IEventPublisher
from layerconf.interfaces.schema_validator import ISchemaValidator

__all__ = [
    "IConfigLoader",
    "IConfigRepository",
    "IEventPublisher",
    "ISchemaValidator",
]
