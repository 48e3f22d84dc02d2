"""End-to-end tests: real files, real environment mapping, real watcher.

These exercise the engine exactly as a host application would, through
``build_engine`` → ``start`` → read API → ``stop``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError
from watchdog.observers.polling import PollingObserver

from layerconf import (
    CONFIG_UPDATED_TOPIC,
    ConfigEngineSettings,
    ConfigImmutableError,
    ConfigNotFoundError,
    ConfigUpdatedEvent,
    ConfigValidationError,
    ModuleMetadata,
    ModuleState,
    build_engine,
    config_module,
)
from tests._helpers import RetryConfig, ServiceConfig, write_json, write_yaml

pytestmark = pytest.mark.integration


async def _wait_for(predicate: Any, timeout: float = 10.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.05)


@pytest.mark.asyncio
async def test_defaults_overrides_and_environment_round_trip(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    overrides_dir: Path,
    retry_metadata: ModuleMetadata,
) -> None:
    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
    write_yaml(overrides_dir, "mymod", {"timeout": 9000})
    engine = build_engine(
        engine_settings,
        environ={"APP__MYMOD__RETRY_COUNT": "7"},
        logger=MagicMock(),
    )

    service = await engine.start([retry_metadata])
    value = service.get("mymod")

    assert isinstance(value, RetryConfig)
    assert value.retry_count == 7
    assert value.timeout == 9000
    assert service.get_snapshot("mymod").version == 1
    await engine.stop()


@pytest.mark.asyncio
async def test_nested_schema_with_mixed_file_formats(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    overrides_dir: Path,
) -> None:
    @config_module("service", ServiceConfig)
    class ServiceModule:
        pass

    write_yaml(defaults_dir, "service", {"name": "api", "features": {"tags": ["a", "b"]}})
    write_json(overrides_dir, "service", {"database": {"host": "db.internal"}, "features": {"tags": ["c"]}})
    engine = build_engine(
        engine_settings,
        environ={"APP__SERVICE__DATABASE__POOL_SIZE": "20"},
        logger=MagicMock(),
    )

    service = await engine.start([ServiceModule])
    value = service.get("service")

    assert value.name == "api"
    assert value.database.host == "db.internal"
    assert value.database.port == 5432
    assert value.database.pool_size == 20
    assert value.features.tags == ("c",)
    with pytest.raises(ValidationError):
        value.database.host = "elsewhere"


@pytest.mark.asyncio
async def test_invalid_module_is_isolated_at_startup(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
) -> None:
    write_yaml(defaults_dir, "a", {"retryCount": 1, "timeout": 2})
    write_yaml(defaults_dir, "b", {"retryCount": "lots"})
    engine = build_engine(engine_settings, environ={}, logger=MagicMock())

    service = await engine.start(
        [ModuleMetadata(key="a", schema=RetryConfig), ModuleMetadata(key="b", schema=RetryConfig)]
    )

    assert service.get("a").timeout == 2
    assert service.state("b") is ModuleState.FAILED
    with pytest.raises(ConfigNotFoundError):
        service.get("b")

    # Fixing the file and reloading brings the module up.
    write_yaml(defaults_dir, "b", {"retryCount": 5, "timeout": 6})
    await service.reload("b")
    assert service.get("b").retry_count == 5
    assert service.state("b") is ModuleState.READY


@pytest.mark.asyncio
async def test_manual_reload_updates_proxy_and_notifies(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    retry_metadata: ModuleMetadata,
) -> None:
    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
    engine = build_engine(engine_settings, environ={}, logger=MagicMock())
    service = await engine.start([retry_metadata])
    received: list[ConfigUpdatedEvent] = []
    engine.publisher.subscribe(CONFIG_UPDATED_TOPIC, received.append)
    proxy = service.get_proxy("mymod")

    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 100})
    await service.reload("mymod")

    assert proxy.timeout == 100
    assert service.get_snapshot("mymod").version == 2
    assert [(e.key, e.value.timeout, e.old_value.timeout) for e in received] == [("mymod", 100, 5000)]
    with pytest.raises(ConfigImmutableError):
        proxy.timeout = 1


@pytest.mark.asyncio
async def test_invalid_edit_keeps_last_good_snapshot(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    retry_metadata: ModuleMetadata,
) -> None:
    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
    engine = build_engine(engine_settings, environ={}, logger=MagicMock())
    service = await engine.start([retry_metadata])

    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": "later"})
    with pytest.raises(ConfigValidationError):
        await service.reload("mymod")

    assert service.get("mymod").timeout == 5000
    assert service.get_snapshot("mymod").version == 1


@pytest.mark.asyncio
async def test_hot_reload_picks_up_file_changes(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    overrides_dir: Path,
    retry_metadata: ModuleMetadata,
) -> None:
    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
    settings = engine_settings.model_copy(update={"hot_reload": True})
    engine = build_engine(
        settings,
        environ={},
        observer_factory=lambda: PollingObserver(timeout=0.1),
        logger=MagicMock(),
    )
    service = await engine.start([retry_metadata])
    proxy = service.get_proxy("mymod")
    try:
        assert engine.watcher is not None and engine.watcher.running
        # Let the polling observer take its first directory snapshot.
        await asyncio.sleep(0.3)

        write_yaml(overrides_dir, "mymod", {"timeout": 7500})
        await _wait_for(lambda: service.get_snapshot("mymod").version >= 2)

        assert proxy.timeout == 7500
        assert proxy.retry_count == 3
    finally:
        await engine.stop()

    assert engine.watcher.running is False


@pytest.mark.asyncio
async def test_hot_reload_picks_up_overrides_directory_created_later(
    engine_settings: ConfigEngineSettings,
    defaults_dir: Path,
    tmp_path: Path,
    retry_metadata: ModuleMetadata,
) -> None:
    write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
    late_overrides = tmp_path / "late_mrg"
    settings = engine_settings.model_copy(update={"hot_reload": True, "overrides_path": str(late_overrides)})
    engine = build_engine(
        settings,
        environ={},
        observer_factory=lambda: PollingObserver(timeout=0.1),
        logger=MagicMock(),
    )
    service = await engine.start([retry_metadata])
    try:
        assert service.get("mymod").timeout == 5000
        await asyncio.sleep(0.3)

        # Deploy the overrides directory with its file already inside.
        staging = tmp_path / "staging"
        staging.mkdir()
        write_yaml(staging, "mymod", {"timeout": 1200})
        staging.rename(late_overrides)
        await _wait_for(lambda: service.get_snapshot("mymod").version >= 2)
        assert service.get("mymod").timeout == 1200

        # The new directory is watched like any other from now on.
        write_yaml(late_overrides, "mymod", {"timeout": 1300})
        await _wait_for(lambda: service.get("mymod").timeout == 1300)
    finally:
        await engine.stop()
