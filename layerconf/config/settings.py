"""Engine settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# These are the knobs of the configuration engine itself, not of the
# modules it serves.  pydantic-settings reads them from two sources
# (in priority order):
#
#   1. **Environment variables**: e.g. LAYERCONF_HOT_RELOAD=true
#   2. **.env file**: key=value lines in the working directory
#
# Field ``hot_reload`` maps to ``LAYERCONF_HOT_RELOAD``, and so on.
#
# Do not confuse ``env_prefix`` (the prefix the engine scans for *module*
# overrides, default ``APP__``) with the ``LAYERCONF_`` prefix below, which
# only configures the engine.
# ──────────────────────────────────────────────────────────────────────
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DEFAULTS_PATH = "./config_df"
DEFAULT_OVERRIDES_PATH = "./config_mrg"
DEFAULT_ENV_PREFIX = "APP__"
ENV_DELIMITER = "__"
CONFIG_FILE_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml", ".json")


class ConfigEngineSettings(BaseSettings):
    """layerconf engine settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="LAYERCONF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Sources ===
    defaults_path: str = DEFAULT_DEFAULTS_PATH    # framework-supplied defaults
    overrides_path: str = DEFAULT_OVERRIDES_PATH  # deployment overrides
    env_prefix: str = DEFAULT_ENV_PREFIX
    # "camel" turns RETRY_COUNT into retryCount, "snake" into retry_count.
    env_key_style: Literal["camel", "snake"] = "camel"

    # === Loading ===
    load_timeout: float = Field(default=5.0, gt=0)

    # === Hot reload ===
    hot_reload: bool = False
    reload_debounce: float = Field(default=0.5, ge=0)

    # === Logging ===
    log_level: str = "INFO"
    app_env: str = "development"
