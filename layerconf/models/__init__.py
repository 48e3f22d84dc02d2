"""Data models for the configuration engine."""

from layerconf.models.config import (
    CONFIG_UPDATED_TOPIC,
    ConfigKey,
    ConfigOrigin,
    ConfigSnapshot,
    ConfigUpdatedEvent,
    ModuleMetadata,
    ModuleState,
    config_module,
    metadata_for,
)

__all__ = [
    "CONFIG_UPDATED_TOPIC",
    "ConfigKey",
    "ConfigOrigin",
    "ConfigSnapshot",
    "ConfigUpdatedEvent",
    "ModuleMetadata",
    "ModuleState",
    "config_module",
    "metadata_for",
]
