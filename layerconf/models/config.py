"""Core data models for the configuration engine.

Snapshots and update events are frozen Pydantic v2 models: a reload never
edits a snapshot in place, it builds a brand-new one and swaps the stored
reference.  ``ModuleMetadata`` is a plain frozen dataclass because it holds
an arbitrary schema object and is internal to discovery.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, field_serializer

from layerconf.utils.freeze import thaw

ConfigKey = str

# Topic published on the event bus after every successful reload.
CONFIG_UPDATED_TOPIC = "config.updated"

_METADATA_ATTR = "__config_module__"


class ConfigOrigin(str, Enum):  # noqa: UP042
    """Source layers that can contribute to a resolved configuration."""

    DEFAULTS = "YAML(df)"    # framework defaults directory
    OVERRIDES = "YAML(mrg)"  # user overrides directory
    ENV = "ENV"              # process environment
    NONE = "NONE"            # nothing contributed; schema defaults only


class ModuleState(str, Enum):  # noqa: UP042
    """Lifecycle of a single configuration key.

    UNREGISTERED → LOADING → READY ⇄ RELOADING, or LOADING → FAILED.
    A READY key whose reload fails goes back to READY at its last version.
    """

    UNREGISTERED = "UNREGISTERED"
    LOADING = "LOADING"
    READY = "READY"
    RELOADING = "RELOADING"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ModuleMetadata:
    """Registration record for one configuration module.

    Attributes:
        key: Unique, case-sensitive module key; also the file stem and the
            environment variable scope.
        schema: Anything the injected validator understands (for the default
            validator: a pydantic model class, a ``TypeAdapter`` or a type).
        target: The class or object that declared the module, if any.
    """

    key: ConfigKey
    schema: Any
    target: Any = None


def config_module(key: ConfigKey, schema: Any):  # noqa: ANN201
    """Class decorator declaring a configuration module.

    The decorated class is returned unchanged apart from a
    ``__config_module__`` attribute holding its :class:`ModuleMetadata`,
    which :func:`metadata_for` reads at startup.
    """

    def decorator(cls: type) -> type:
        setattr(cls, _METADATA_ATTR, ModuleMetadata(key=key, schema=schema, target=cls))
        return cls

    return decorator


def metadata_for(module: Any) -> ModuleMetadata:
    """Return the :class:`ModuleMetadata` declared by *module*.

    Accepts either a ready-made ``ModuleMetadata`` or a class decorated
    with :func:`config_module`.

    Raises:
        TypeError: If *module* declares no configuration.
    """
    if isinstance(module, ModuleMetadata):
        return module
    # Look in the class's own namespace so subclasses do not inherit the key.
    metadata = vars(module).get(_METADATA_ATTR) if isinstance(module, type) else None
    if metadata is None:
        raise TypeError(f"{module!r} does not declare a configuration module")
    return metadata


class ConfigSnapshot(BaseModel):
    """The value currently published for a key, with its version and timestamp."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any
    version: int = Field(ge=1)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @field_serializer("value", mode="wrap")
    def _serialize_value(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(thaw(value))


class ConfigUpdatedEvent(BaseModel):
    """Payload published after a module has been (re)loaded successfully."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: ConfigKey
    value: Any
    old_value: Any = None

    @field_serializer("value", "old_value", mode="wrap")
    def _serialize_values(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        return handler(thaw(value))
