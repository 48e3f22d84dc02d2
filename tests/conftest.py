"""Shared pytest fixtures for the layerconf test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from layerconf.config.settings import ConfigEngineSettings
from layerconf.models.config import ModuleMetadata
from tests._helpers import RetryConfig, ServiceConfig


@pytest.fixture
def defaults_dir(tmp_path: Path) -> Path:
    """Directory holding framework default files (``config_df``)."""
    path = tmp_path / "config_df"
    path.mkdir()
    return path


@pytest.fixture
def overrides_dir(tmp_path: Path) -> Path:
    """Directory holding deployment override files (``config_mrg``)."""
    path = tmp_path / "config_mrg"
    path.mkdir()
    return path


@pytest.fixture
def mock_logger() -> MagicMock:
    """A stand-in structlog logger; assert on ``.warning``/``.error`` calls."""
    return MagicMock(name="logger")


@pytest.fixture
def engine_settings(defaults_dir: Path, overrides_dir: Path) -> ConfigEngineSettings:
    """Engine settings pointing at the temporary directories."""
    return ConfigEngineSettings(
        defaults_path=str(defaults_dir),
        overrides_path=str(overrides_dir),
        env_prefix="APP__",
        hot_reload=False,
        load_timeout=5.0,
        reload_debounce=0.05,
    )


@pytest.fixture
def retry_metadata() -> ModuleMetadata:
    return ModuleMetadata(key="mymod", schema=RetryConfig)


@pytest.fixture
def service_metadata() -> ModuleMetadata:
    return ModuleMetadata(key="service", schema=ServiceConfig)
