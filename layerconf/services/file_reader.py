"""Reads one configuration layer from a directory of YAML/JSON files.

For key ``database`` and directory ``./config_df`` the reader tries
``database.yaml``, ``database.yml`` and ``database.json`` in that order and
parses the first one that exists.  A missing file is the normal case for an
optional layer and yields ``{}``; so does a file that cannot be parsed, after
a warning.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog
import yaml

from layerconf.config.settings import CONFIG_FILE_EXTENSIONS
from layerconf.utils.logging import get_logger


class ConfigFileReader:
    """Async reader for ``{directory}/{key}.{yaml|yml|json}`` files."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._logger = logger or get_logger(__name__)

    async def read(self, directory: str | Path, key: str) -> dict[str, Any]:
        """Read and parse the file for *key* inside *directory*.

        Args:
            directory: Base directory; relative paths resolve against the
                current working directory.
            key: Configuration key (the file name without extension).

        Returns:
            The parsed mapping, or ``{}`` when the file is missing, empty,
            unparseable or not a mapping.

        Raises:
            OSError: If the file exists but cannot be read (e.g. permissions).
        """
        path = find_config_file(directory, key)
        if path is None:
            self._logger.debug("config_file_missing", key=key, directory=str(directory))
            return {}

        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            # Removed between the existence check and the read.
            self._logger.debug("config_file_missing", key=key, path=str(path))
            return {}
        except UnicodeDecodeError as exc:
            self._logger.warning("config_file_parse_failed", key=key, path=str(path), error=str(exc))
            return {}

        try:
            data = _parse(path, content)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            self._logger.warning("config_file_parse_failed", key=key, path=str(path), error=str(exc))
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            self._logger.warning(
                "config_file_not_a_mapping",
                key=key,
                path=str(path),
                found=type(data).__name__,
            )
            return {}
        return data


def find_config_file(directory: str | Path, key: str) -> Path | None:
    """Return the first existing ``{directory}/{key}{ext}`` path, or ``None``."""
    base = Path(directory)
    for extension in CONFIG_FILE_EXTENSIONS:
        candidate = base / f"{key}{extension}"
        if candidate.is_file():
            return candidate
    return None


def _parse(path: Path, content: str) -> Any:
    if path.suffix == ".json":
        return json.loads(content) if content.strip() else None
    # safe_load never instantiates arbitrary Python objects from tags.
    return yaml.safe_load(content)
