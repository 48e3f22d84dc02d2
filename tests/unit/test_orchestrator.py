"""Unit tests for ConfigLoadOrchestrator."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from layerconf.config.settings import ConfigEngineSettings
from layerconf.models.config import ModuleMetadata
from layerconf.pipeline.orchestrator import ConfigLoadOrchestrator
from layerconf.services.env_extractor import EnvSourceExtractor
from layerconf.services.file_reader import ConfigFileReader
from layerconf.services.schema_registry import SchemaRegistry
from layerconf.services.schema_validator import PydanticSchemaValidator
from layerconf.utils.errors import ConfigLoaderError, ConfigValidationError
from tests._helpers import RetryConfig, logged_events, write_yaml


def _build(
    settings: ConfigEngineSettings,
    logger: MagicMock,
    environ: dict[str, str] | None = None,
    file_reader: Any = None,
    registry: SchemaRegistry | None = None,
) -> ConfigLoadOrchestrator:
    return ConfigLoadOrchestrator(
        settings=settings,
        registry=registry or SchemaRegistry(logger=logger),
        file_reader=file_reader or ConfigFileReader(logger=logger),
        env_extractor=EnvSourceExtractor(logger=logger),
        validator=PydanticSchemaValidator(logger=logger),
        logger=logger,
        environ=environ if environ is not None else {},
    )


class TestLoad:
    @pytest.mark.asyncio
    async def test_layers_resolve_with_precedence(
        self,
        engine_settings: ConfigEngineSettings,
        defaults_dir: Path,
        overrides_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
        write_yaml(overrides_dir, "mymod", {"timeout": 9000})
        orchestrator = _build(engine_settings, mock_logger, {"APP__MYMOD__RETRY_COUNT": "7"})

        value = await orchestrator.load(retry_metadata)

        assert isinstance(value, RetryConfig)
        assert value.retry_count == 7
        assert value.timeout == 9000

    @pytest.mark.asyncio
    async def test_defaults_only(
        self,
        engine_settings: ConfigEngineSettings,
        defaults_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        write_yaml(defaults_dir, "mymod", {"retryCount": 3, "timeout": 5000})
        value = await _build(engine_settings, mock_logger).load(retry_metadata)
        assert (value.retry_count, value.timeout) == (3, 5000)

    @pytest.mark.asyncio
    async def test_env_only_satisfies_schema(
        self,
        engine_settings: ConfigEngineSettings,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        env = {"APP__MYMOD__RETRY_COUNT": "1", "APP__MYMOD__TIMEOUT": "2"}
        value = await _build(engine_settings, mock_logger, env).load(retry_metadata)
        assert (value.retry_count, value.timeout) == (1, 2)

    @pytest.mark.asyncio
    async def test_merged_sources_are_logged(
        self,
        engine_settings: ConfigEngineSettings,
        overrides_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        write_yaml(overrides_dir, "mymod", {"timeout": 1})
        env = {"APP__MYMOD__RETRY_COUNT": "2"}
        await _build(engine_settings, mock_logger, env).load(retry_metadata)

        merged = [ctx for event, ctx in logged_events(mock_logger, "debug") if event == "config_sources_merged"]
        assert merged == [{"key": "mymod", "sources": ["YAML(mrg)", "ENV"]}]

    @pytest.mark.asyncio
    async def test_no_sources_logs_none_origin(self, engine_settings: ConfigEngineSettings, mock_logger: MagicMock) -> None:
        metadata = ModuleMetadata(key="empty", schema=dict)
        assert await _build(engine_settings, mock_logger).load(metadata) == {}

        merged = [ctx for event, ctx in logged_events(mock_logger, "debug") if event == "config_sources_merged"]
        assert merged[0]["sources"] == ["NONE"]

    @pytest.mark.asyncio
    async def test_validation_error_passes_through(
        self,
        engine_settings: ConfigEngineSettings,
        defaults_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        write_yaml(defaults_dir, "mymod", {"retryCount": "many"})
        with pytest.raises(ConfigValidationError) as exc_info:
            await _build(engine_settings, mock_logger).load(retry_metadata)
        assert exc_info.value.key == "mymod"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(
        self,
        engine_settings: ConfigEngineSettings,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        reader = MagicMock(spec=ConfigFileReader)
        reader.read = AsyncMock(side_effect=PermissionError("denied"))
        orchestrator = _build(engine_settings, mock_logger, file_reader=reader)

        with pytest.raises(ConfigLoaderError) as exc_info:
            await orchestrator.load(retry_metadata)

        assert exc_info.value.key == "mymod"
        assert exc_info.value.cause == "denied"
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert logged_events(mock_logger, "error")[0][0] == "config_load_failed"

    @pytest.mark.asyncio
    async def test_slow_load_times_out(
        self,
        engine_settings: ConfigEngineSettings,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        async def slow_read(directory: Any, key: str) -> dict[str, Any]:
            await asyncio.sleep(5)
            return {}

        reader = MagicMock(spec=ConfigFileReader)
        reader.read = slow_read
        settings = engine_settings.model_copy(update={"load_timeout": 0.05})
        orchestrator = _build(settings, mock_logger, file_reader=reader)

        with pytest.raises(ConfigLoaderError, match="timed out after 0.05s"):
            await orchestrator.load(retry_metadata)
        assert logged_events(mock_logger, "error")[0][0] == "config_load_timeout"

    @pytest.mark.asyncio
    async def test_load_reflects_files_at_call_time(
        self,
        engine_settings: ConfigEngineSettings,
        defaults_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        orchestrator = _build(engine_settings, mock_logger)
        write_yaml(defaults_dir, "mymod", {"retryCount": 1, "timeout": 1})
        first = await orchestrator.load(retry_metadata)
        write_yaml(defaults_dir, "mymod", {"retryCount": 2, "timeout": 1})
        second = await orchestrator.load(retry_metadata)
        assert (first.retry_count, second.retry_count) == (1, 2)


class TestReload:
    @pytest.mark.asyncio
    async def test_unregistered_key_returns_none(
        self, engine_settings: ConfigEngineSettings, mock_logger: MagicMock
    ) -> None:
        assert await _build(engine_settings, mock_logger).reload("ghost") is None
        assert logged_events(mock_logger, "warning") == [("reload_unregistered_key", {"key": "ghost"})]

    @pytest.mark.asyncio
    async def test_registered_key_is_loaded(
        self,
        engine_settings: ConfigEngineSettings,
        defaults_dir: Path,
        retry_metadata: ModuleMetadata,
        mock_logger: MagicMock,
    ) -> None:
        registry = SchemaRegistry(logger=mock_logger)
        registry.register(retry_metadata)
        write_yaml(defaults_dir, "mymod", {"retryCount": 4, "timeout": 4})

        value = await _build(engine_settings, mock_logger, registry=registry).reload("mymod")

        assert value.retry_count == 4
