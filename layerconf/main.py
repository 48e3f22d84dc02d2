"""layerconf engine assembly.

Wires together the registry, sources, validator, orchestrator, repository,
service and (optionally) the watcher via constructor injection.  Host
applications call :func:`build_engine` once at bootstrap, then
``await engine.start(modules)`` and ``await engine.stop()`` from their own
lifecycle hooks.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from watchdog.observers.api import BaseObserver

from layerconf.config.settings import ConfigEngineSettings
from layerconf.interfaces.event_publisher import IEventPublisher
from layerconf.interfaces.schema_validator import ISchemaValidator
from layerconf.pipeline.orchestrator import ConfigLoadOrchestrator
from layerconf.providers.event.memory_event_bus import InMemoryEventBus
from layerconf.providers.repository.memory_repository import InMemoryConfigRepository
from layerconf.services.config_service import ConfigService
from layerconf.services.config_watcher import ConfigWatcher
from layerconf.services.env_extractor import EnvSourceExtractor
from layerconf.services.file_reader import ConfigFileReader
from layerconf.services.schema_registry import SchemaRegistry
from layerconf.services.schema_validator import PydanticSchemaValidator
from layerconf.utils.logging import configure_logging, get_logger


@dataclass
class ConfigEngine:
    """A fully wired engine.

    ``watcher`` is ``None`` when hot reload is disabled; everything else
    behaves identically, only ``reload`` is never called automatically.
    """

    settings: ConfigEngineSettings
    service: ConfigService
    publisher: IEventPublisher
    watcher: ConfigWatcher | None = None

    async def start(self, modules: Iterable[Any]) -> ConfigService:
        """Load every module, then start watching for file changes."""
        await self.service.initialize(modules)
        if self.watcher is not None:
            await self.watcher.start()
        return self.service

    async def stop(self) -> None:
        if self.watcher is not None:
            await self.watcher.stop()


def build_engine(
    settings: ConfigEngineSettings | None = None,
    *,
    publisher: IEventPublisher | None = None,
    validator: ISchemaValidator | None = None,
    observer_factory: Callable[[], BaseObserver] | None = None,
    environ: Mapping[str, str] | None = None,
    logger: structlog.BoundLogger | None = None,
) -> ConfigEngine:
    """Build a :class:`ConfigEngine` from *settings*.

    Args:
        settings: Engine settings; read from the environment when omitted.
        publisher: Notification bus; an :class:`InMemoryEventBus` by default.
        validator: Schema validator; pydantic by default.
        observer_factory: watchdog observer factory for the watcher.
        environ: Environment to read module overrides from (``os.environ``
            when omitted).
        logger: Logger shared by every component.  When omitted, logging is
            configured from ``settings.log_level`` and ``settings.app_env``.

    Returns:
        The assembled engine.  Nothing is loaded until ``start`` is awaited.
    """
    app_settings = settings or ConfigEngineSettings()
    if logger is None:
        configure_logging(log_level=app_settings.log_level, app_env=app_settings.app_env)
    log = logger or get_logger(__name__)
    bus = publisher or InMemoryEventBus(logger=log)

    registry = SchemaRegistry(logger=log)
    orchestrator = ConfigLoadOrchestrator(
        settings=app_settings,
        registry=registry,
        file_reader=ConfigFileReader(logger=log),
        env_extractor=EnvSourceExtractor(key_style=app_settings.env_key_style, logger=log),
        validator=validator or PydanticSchemaValidator(logger=log),
        logger=log,
        environ=environ,
    )
    service = ConfigService(
        registry=registry,
        loader=orchestrator,
        repository=InMemoryConfigRepository(logger=log),
        publisher=bus,
        logger=log,
    )

    watcher = None
    if app_settings.hot_reload:
        watcher = ConfigWatcher(
            service,
            directories=[app_settings.defaults_path, app_settings.overrides_path],
            debounce=app_settings.reload_debounce,
            observer_factory=observer_factory,
            logger=log,
        )

    log.debug(
        "config_engine_built",
        defaults_path=app_settings.defaults_path,
        overrides_path=app_settings.overrides_path,
        env_prefix=app_settings.env_prefix,
        hot_reload=app_settings.hot_reload,
    )
    return ConfigEngine(settings=app_settings, service=service, publisher=bus, watcher=watcher)
