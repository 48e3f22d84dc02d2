"""Extracts a module's configuration overrides from environment variables.

# ─── NAMING SCHEME ─────────────────────────────────────────────────────
#
#   {PREFIX}{KEY}__{PATH}__{TO}__{FIELD}=value
#
#   APP__MYMOD__RETRY_COUNT=7             → {"retryCount": 7}
#   APP__MODULE_DEEP_TEST__DB__HOST=x     → {"db": {"host": "x"}}   (key "module.deep-test")
#
# The key is upper-cased with "." and "-" mapped to "_".  Each path segment
# is converted from UPPER_SNAKE to the module's field naming style
# (lower camel case by default).  Values are coerced: "true"/"false" become
# booleans, decimal numbers become int/float, everything else stays a string.
#
# When two variables collide (one treats a segment as a leaf, the other as
# a parent), variables are applied in sorted name order and the last write
# wins.  The validator is responsible for rejecting the result if it does
# not fit the schema.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any, Literal

import structlog

from layerconf.config.settings import ENV_DELIMITER
from layerconf.utils.logging import get_logger

KeyStyle = Literal["camel", "snake"]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+|[0-9]+)(?:[eE][+-]?[0-9]+)?")
_CAMEL_RE = re.compile(r"_([a-z])")


class EnvSourceExtractor:
    """Rebuilds a nested override object from flattened environment variables."""

    def __init__(
        self,
        key_style: KeyStyle = "camel",
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._key_style = key_style
        self._logger = logger or get_logger(__name__)

    def extract(
        self,
        key: str,
        prefix: str,
        environ: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Return the nested overrides for *key* found in *environ*.

        Args:
            key: Configuration key.
            prefix: Global prefix, e.g. ``"APP__"``.
            environ: Environment to scan; defaults to ``os.environ``.

        Returns:
            A new nested dict (empty when no variable matches).
        """
        env = os.environ if environ is None else environ
        scoped_prefix = scoped_env_prefix(key, prefix)
        result: dict[str, Any] = {}
        matched = 0

        for name in sorted(env):
            if not name.startswith(scoped_prefix):
                continue
            path = [
                self._format_segment(segment)
                for segment in name[len(scoped_prefix):].split(ENV_DELIMITER)
                if segment
            ]
            if not path:
                continue
            _set_deep(result, path, coerce_env_value(env[name]))
            matched += 1

        if matched:
            self._logger.debug("env_overrides_found", key=key, prefix=scoped_prefix, count=matched)
        return result

    def _format_segment(self, segment: str) -> str:
        lowered = segment.lower()
        if self._key_style == "snake":
            return lowered
        return _CAMEL_RE.sub(lambda match: match.group(1).upper(), lowered)


def scoped_env_prefix(key: str, prefix: str) -> str:
    """Return the variable-name prefix that scopes *key*, e.g. ``APP__MYMOD__``."""
    return f"{prefix}{re.sub(r'[.-]', '_', key.upper())}{ENV_DELIMITER}"


def coerce_env_value(value: str) -> bool | int | float | str:
    """Convert an environment string to a bool, int or float where it fully parses."""
    if value == "true":
        return True
    if value == "false":
        return False
    stripped = value.strip()
    if _INT_RE.fullmatch(stripped):
        return int(stripped)
    if _FLOAT_RE.fullmatch(stripped):
        return float(stripped)
    return value


def _set_deep(target: dict[str, Any], path: list[str], value: Any) -> None:
    current = target
    for part in path[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            # Last write wins: a previous leaf is replaced by a branch.
            child = {}
            current[part] = child
        current = child
    current[path[-1]] = value
