"""Configuration service: discovery, the read API and hot reload.

# ─── LIFECYCLE OF A KEY ────────────────────────────────────────────────
#
#   UNREGISTERED ──initialize()──→ LOADING ──ok──→ READY (version 1)
#                                          └─err─→ FAILED
#
#   READY ──reload()──→ RELOADING ──ok──→ READY (version n+1)
#                                 └─err─→ READY (version n, unchanged)
#
# Startup isolates failures per key: a module whose configuration does not
# validate is logged and skipped so the rest of the system can boot.  Its
# readers get ConfigNotFoundError at first use.  Explicit reloads propagate
# errors to the caller while the last good snapshot keeps serving reads.
#
# Readers never block: get/get_snapshot/get_proxy read whatever snapshot the
# repository holds right now, and the repository only ever swaps in fully
# built, validated, frozen snapshots.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from layerconf.interfaces.config_loader import IConfigLoader
from layerconf.interfaces.config_repository import IConfigRepository
from layerconf.interfaces.event_publisher import IEventPublisher
from layerconf.models.config import (
    CONFIG_UPDATED_TOPIC,
    ConfigSnapshot,
    ConfigUpdatedEvent,
    ModuleState,
    metadata_for,
)
from layerconf.services.schema_registry import SchemaRegistry, validate_config_key
from layerconf.utils.errors import ConfigError, ConfigImmutableError, ConfigNotFoundError
from layerconf.utils.logging import get_logger


class ConfigService:
    """Central access point for every registered configuration module.

    All collaborators are injected.  ``publisher`` may be ``None`` when no
    one needs update notifications.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        loader: IConfigLoader,
        repository: IConfigRepository,
        publisher: IEventPublisher | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._registry = registry
        self._loader = loader
        self._repository = repository
        self._publisher = publisher
        self._logger = logger or get_logger(__name__)
        self._states: dict[str, ModuleState] = {}
        self._reload_locks: dict[str, asyncio.Lock] = {}
        self._initialized = False

    # ------------------------------------------------------------------
    # Startup discovery
    # ------------------------------------------------------------------

    async def initialize(self, modules: Iterable[Any]) -> None:
        """Register and load every module exactly once.

        Parameters
        ----------
        modules:
            ``ModuleMetadata`` records or classes decorated with
            ``@config_module``.  Duplicate keys are logged and skipped (the
            first registration wins).

        Raises
        ------
        ConfigError
            If called more than once.
        TypeError
            If an entry declares no configuration module.
        ValueError
            If an entry's key is not a non-empty string.

        Entries are checked before anything is registered, so a rejected
        call leaves the service untouched and it may be called again.
        """
        if self._initialized:
            raise ConfigError("configuration service is already initialized")
        entries = [metadata_for(module) for module in modules]
        for metadata in entries:
            validate_config_key(metadata.key)
        self._initialized = True
        self._logger.info("config_engine_initializing", modules=len(entries))

        for metadata in entries:
            if not self._registry.register(metadata):
                continue
            key = metadata.key
            self._states[key] = ModuleState.LOADING
            try:
                value = await self._loader.load(metadata)
            except Exception as exc:
                self._states[key] = ModuleState.FAILED
                self._logger.error(
                    "config_module_init_failed",
                    key=key,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                continue
            self._repository.save(key, ConfigSnapshot(value=value, version=1))
            self._states[key] = ModuleState.READY

        failed = [key for key, state in self._states.items() if state is ModuleState.FAILED]
        self._logger.info(
            "config_engine_initialized",
            loaded=len(self._repository.keys()),
            failed=failed,
        )

    @property
    def initialized(self) -> bool:
        return self._initialized

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def get(self, key: str) -> Any:
        """Return the current value for *key*.

        Raises
        ------
        ConfigNotFoundError
            If *key* never loaded successfully.
        """
        snapshot = self._repository.get(key)
        if snapshot is None:
            self._logger.error("config_key_not_found", key=key)
            raise ConfigNotFoundError(key)
        return snapshot.value

    def get_snapshot(self, key: str) -> ConfigSnapshot | None:
        """Return the full snapshot (value, version, timestamp) or ``None``."""
        return self._repository.get(key)

    def get_proxy(self, key: str) -> ConfigProxy:
        """Return a live read-through view of *key*.

        Every attribute or item read on the proxy consults the repository at
        access time, so long-lived holders always observe the latest reload.

        Raises
        ------
        ConfigNotFoundError
            If *key* has no snapshot.
        """
        if not self._repository.has(key):
            raise ConfigNotFoundError(key)
        return ConfigProxy(self._repository, key)

    def keys(self) -> list[str]:
        """Keys that currently have a snapshot."""
        return self._repository.keys()

    def registered_keys(self) -> list[str]:
        """Keys registered at startup, including those that failed to load."""
        return self._registry.keys()

    def state(self, key: str) -> ModuleState:
        return self._states.get(key, ModuleState.UNREGISTERED)

    # ------------------------------------------------------------------
    # Hot reload
    # ------------------------------------------------------------------

    async def reload(self, key: str) -> ConfigUpdatedEvent | None:
        """Re-resolve *key* and publish a new snapshot version.

        Returns
        -------
        ConfigUpdatedEvent or None
            The published event, or ``None`` if *key* is not registered.

        Raises
        ------
        ConfigError
            Whatever the loader raised.  The stored snapshot is left as it
            was and the key stays at its previous state.
        """
        metadata = self._registry.get(key)
        if metadata is None:
            self._logger.warning("reload_unregistered_key", key=key)
            return None

        lock = self._reload_locks.setdefault(key, asyncio.Lock())
        async with lock:
            previous_state = self.state(key)
            self._states[key] = ModuleState.RELOADING
            old_snapshot = self._repository.get(key)
            try:
                value = await self._loader.load(metadata)
            except Exception as exc:
                self._states[key] = previous_state
                self._logger.error(
                    "config_reload_failed",
                    key=key,
                    error=str(exc),
                    version=old_snapshot.version if old_snapshot else None,
                )
                raise

            version = old_snapshot.version + 1 if old_snapshot else 1
            stored = self._repository.save(key, ConfigSnapshot(value=value, version=version))
            self._states[key] = ModuleState.READY
            self._logger.info("config_reloaded", key=key, version=version)

        event = ConfigUpdatedEvent(
            key=key,
            value=stored.value,
            old_value=old_snapshot.value if old_snapshot else None,
        )
        await self._publish(event)
        return event

    async def _publish(self, event: ConfigUpdatedEvent) -> None:
        if self._publisher is None:
            return
        try:
            await self._publisher.publish(CONFIG_UPDATED_TOPIC, event)
        except Exception as exc:
            # The new snapshot is already authoritative; notification is best effort.
            self._logger.warning("config_update_publish_failed", key=event.key, error=str(exc))


class ConfigProxy:
    """Read-through view of one key in a repository.

    Holds only the repository and the key; each access looks up the current
    snapshot.  Mapping values are exposed both as attributes and items.
    """

    __slots__ = ("_repository", "_key")

    def __init__(self, repository: IConfigRepository, key: str) -> None:
        object.__setattr__(self, "_repository", repository)
        object.__setattr__(self, "_key", key)

    def _current(self) -> Any:
        snapshot = self._repository.get(self._key)
        if snapshot is None:
            raise ConfigNotFoundError(self._key)
        return snapshot.value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__") and name.endswith("__"):
            raise AttributeError(name)
        value = self._current()
        if isinstance(value, Mapping):
            try:
                return value[name]
            except KeyError:
                raise AttributeError(name) from None
        return getattr(value, name)

    def __getitem__(self, item: Any) -> Any:
        value = self._current()
        if isinstance(value, Mapping):
            return value[item]
        if isinstance(item, str):
            try:
                return getattr(value, item)
            except AttributeError:
                raise KeyError(item) from None
        return value[item]

    def __contains__(self, item: Any) -> bool:
        value = self._current()
        if isinstance(value, Mapping):
            return item in value
        if isinstance(value, BaseModel):
            return item in type(value).model_fields or item in (value.model_extra or {})
        return isinstance(item, str) and hasattr(value, item)

    def __setattr__(self, name: str, value: Any) -> None:
        raise ConfigImmutableError(self._key)

    def __delattr__(self, name: str) -> None:
        raise ConfigImmutableError(self._key)

    def __setitem__(self, item: Any, value: Any) -> None:
        raise ConfigImmutableError(self._key)

    def __delitem__(self, item: Any) -> None:
        raise ConfigImmutableError(self._key)

    def __repr__(self) -> str:
        snapshot = self._repository.get(self._key)
        version = snapshot.version if snapshot else None
        return f"ConfigProxy(key={self._key!r}, version={version})"
