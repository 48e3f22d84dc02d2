"""Utility modules for layerconf.

Available utility modules (all re-exported here for convenience):

- **errors** -- Exception hierarchy rooted at ConfigError; each pipeline
  stage raises its own subclass so callers can handle failures granularly.
- **freeze** -- Recursive freezing of validated values (frozen pydantic
  subclasses, MappingProxyType, tuples, frozensets) and thawing for
  serialization.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **merge** -- Right-biased recursive merge of configuration layers.
"""

# -- Exception hierarchy ----------------------------------------------------
from layerconf.utils.errors import (
    ConfigError,
    ConfigImmutableError,
    ConfigLoaderError,
    ConfigNotFoundError,
    ConfigValidationError,
)

# -- Immutability -------------------------------------------------------------
from layerconf.utils.freeze import deep_freeze, thaw

# -- Structured logging setup -------------------------------------------------
from layerconf.utils.logging import configure_logging, get_logger

# -- Layer merging ------------------------------------------------------------
from layerconf.utils.merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigImmutableError",
    "ConfigLoaderError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "configure_logging",
    "deep_freeze",
    "deep_merge",
    "get_logger",
    "thaw",
]
