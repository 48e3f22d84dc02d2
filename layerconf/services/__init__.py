"""Configuration engine services: sources, validation, the service and the watcher."""

from layerconf.services.config_service import ConfigProxy, ConfigService
from layerconf.services.config_watcher import ConfigWatcher
from layerconf.services.env_extractor import EnvSourceExtractor
from layerconf.services.file_reader import ConfigFileReader
from layerconf.services.schema_registry import SchemaRegistry
from layerconf.services.schema_validator import PydanticSchemaValidator

__all__ = [
    "ConfigFileReader",
    "ConfigProxy",
    "ConfigService",
    "ConfigWatcher",
    "EnvSourceExtractor",
    "PydanticSchemaValidator",
    "SchemaRegistry",
]
