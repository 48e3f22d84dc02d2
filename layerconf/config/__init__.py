"""Configuration of the engine itself: exports ConfigEngineSettings and constants."""

from layerconf.config.settings import (
    CONFIG_FILE_EXTENSIONS,
    DEFAULT_DEFAULTS_PATH,
    DEFAULT_ENV_PREFIX,
    DEFAULT_OVERRIDES_PATH,
    ENV_DELIMITER,
    ConfigEngineSettings,
)

__all__ = [
    "CONFIG_FILE_EXTENSIONS",
    "DEFAULT_DEFAULTS_PATH",
    "DEFAULT_ENV_PREFIX",
    "DEFAULT_OVERRIDES_PATH",
    "ENV_DELIMITER",
    "ConfigEngineSettings",
]
