"""layerconf: layered, schema-validated configuration with hot reload.

Each configuration module is resolved from framework defaults, file
overrides and environment variables (in increasing precedence), validated
against its schema and published as an immutable, versioned snapshot.
"""

from layerconf.config.settings import ConfigEngineSettings
from layerconf.main import ConfigEngine, build_engine
from layerconf.models.config import (
    CONFIG_UPDATED_TOPIC,
    ConfigSnapshot,
    ConfigUpdatedEvent,
    ModuleMetadata,
    ModuleState,
    config_module,
)
from layerconf.services.config_service import ConfigProxy, ConfigService
from layerconf.utils.errors import (
    ConfigError,
    ConfigImmutableError,
    ConfigLoaderError,
    ConfigNotFoundError,
    ConfigValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "CONFIG_UPDATED_TOPIC",
    "ConfigEngine",
    "ConfigEngineSettings",
    "ConfigError",
    "ConfigImmutableError",
    "ConfigLoaderError",
    "ConfigNotFoundError",
    "ConfigProxy",
    "ConfigService",
    "ConfigSnapshot",
    "ConfigUpdatedEvent",
    "ConfigValidationError",
    "ModuleMetadata",
    "ModuleState",
    "build_engine",
    "config_module",
]
