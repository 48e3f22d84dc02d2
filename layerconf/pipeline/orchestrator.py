"""Load orchestrator for the configuration resolution pipeline.

Coordinates the file reader, the environment extractor, the merger and the
schema validator into one fixed sequence per key:

    defaults file → overrides file → environment → merge → validate

ARCHITECTURE NOTE:
    The orchestrator follows the "Pipeline" pattern: it owns no state of its
    own beyond its injected collaborators.  Each ``load`` call is a pure
    function of the files on disk, the environment and the metadata at call
    time, so loads of different keys may run concurrently.  Storing the
    result (and deciding its version) belongs to the ConfigService.

    Error policy: anything that is already a ``ConfigError`` (validation
    failures in particular) passes through unchanged; every other exception
    is wrapped in ``ConfigLoaderError`` with the original chained.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from layerconf.config.settings import ConfigEngineSettings
from layerconf.interfaces.config_loader import IConfigLoader
from layerconf.interfaces.schema_validator import ISchemaValidator
from layerconf.models.config import ConfigOrigin, ModuleMetadata
from layerconf.services.env_extractor import EnvSourceExtractor
from layerconf.services.file_reader import ConfigFileReader
from layerconf.services.schema_registry import SchemaRegistry
from layerconf.utils.errors import ConfigError, ConfigLoaderError
from layerconf.utils.logging import get_logger
from layerconf.utils.merge import deep_merge


class ConfigLoadOrchestrator(IConfigLoader):
    """Runs the resolution pipeline for one configuration module at a time.

    All collaborators are injected at construction time; the orchestrator
    never creates them.  ``environ`` pins the environment the extractor scans
    (``None`` means the live ``os.environ`` at each load).
    """

    def __init__(
        self,
        settings: ConfigEngineSettings,
        registry: SchemaRegistry,
        file_reader: ConfigFileReader,
        env_extractor: EnvSourceExtractor,
        validator: ISchemaValidator,
        logger: structlog.BoundLogger | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._defaults_path = settings.defaults_path
        self._overrides_path = settings.overrides_path
        self._env_prefix = settings.env_prefix
        self._timeout = settings.load_timeout
        self._registry = registry
        self._file_reader = file_reader
        self._env_extractor = env_extractor
        self._validator = validator
        self._environ = environ
        self._logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # IConfigLoader implementation
    # ------------------------------------------------------------------

    async def load(self, metadata: ModuleMetadata) -> Any:
        """Resolve, merge and validate the configuration for *metadata*.

        Raises
        ------
        ConfigValidationError
            If the merged data does not satisfy the schema.
        ConfigLoaderError
            On any other failure, including exceeding ``load_timeout``.
        """
        key = metadata.key
        try:
            return await asyncio.wait_for(self._run(metadata), timeout=self._timeout)
        except ConfigError:
            raise
        except asyncio.TimeoutError as exc:
            self._logger.error("config_load_timeout", key=key, timeout=self._timeout)
            raise ConfigLoaderError(key, f"timed out after {self._timeout}s") from exc
        except Exception as exc:
            self._logger.error("config_load_failed", key=key, error=str(exc))
            raise ConfigLoaderError(key, str(exc) or type(exc).__name__) from exc

    async def reload(self, key: str) -> Any | None:
        """Re-run :meth:`load` for a registered *key*; ``None`` if unregistered."""
        metadata = self._registry.get(key)
        if metadata is None:
            self._logger.warning("reload_unregistered_key", key=key)
            return None
        return await self.load(metadata)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _run(self, metadata: ModuleMetadata) -> Any:
        key = metadata.key
        defaults = await self._file_reader.read(self._defaults_path, key)
        overrides = await self._file_reader.read(self._overrides_path, key)
        env_values = self._env_extractor.extract(key, self._env_prefix, self._environ)

        merged = deep_merge(defaults, overrides, env_values)
        origins = [
            origin.value
            for origin, layer in (
                (ConfigOrigin.DEFAULTS, defaults),
                (ConfigOrigin.OVERRIDES, overrides),
                (ConfigOrigin.ENV, env_values),
            )
            if layer
        ]
        self._logger.debug(
            "config_sources_merged",
            key=key,
            sources=origins or [ConfigOrigin.NONE.value],
        )
        return self._validator.validate(key, merged, metadata.schema)
