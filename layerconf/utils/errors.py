"""Custom exception hierarchy for layerconf.

All engine exceptions inherit from :class:`ConfigError`, which carries an
optional ``key`` so error handlers can identify which configuration module
(e.g. "database", "module.deep.test") caused the failure.

The hierarchy is organized by pipeline stage:

    ConfigError  (base -- catch-all for any configuration error)
    +-- ConfigValidationError  (merged data rejected by the schema)
    +-- ConfigLoaderError      (file/env extraction failed unexpectedly)
    +-- ConfigNotFoundError    (read of a key that never reached READY)
    +-- ConfigImmutableError   (write attempted through the read API)

The load orchestrator passes any ``ConfigError`` through unchanged and wraps
every other exception in :class:`ConfigLoaderError`, so callers only ever
have to handle this hierarchy.
"""


class ConfigError(Exception):
    """Base exception for all configuration engine errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``key`` identifying the configuration module involved.  The ``__str__``
    method prefixes the key in brackets for structured log output, e.g.
    ``[database] Configuration validation failed: ...``.
    """

    def __init__(
        self,
        message: str = "Configuration error",
        key: str | None = None,
    ) -> None:
        self._message = message
        self._key = key
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def key(self) -> str | None:
        return self._key

    def __str__(self) -> str:
        if self._key:
            return f"[{self._key}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Load pipeline errors
# ---------------------------------------------------------------------------

class ConfigValidationError(ConfigError):
    """Raised when a merged configuration object fails schema validation.

    ``details`` enumerates every failing field path and its violation, e.g.
    ``[timeout] Input should be a valid integer, [retryCount] Field required``.
    """

    def __init__(self, key: str, details: str) -> None:
        self._details = details
        super().__init__(
            message=f"Configuration validation failed: {details}",
            key=key,
        )

    @property
    def details(self) -> str:
        return self._details


class ConfigLoaderError(ConfigError):
    """Raised when the pipeline fails outside of validation.

    Typical causes are unreadable files (permission denied) or a load that
    exceeded its time bound.  The original exception, when there is one, is
    chained as ``__cause__``.
    """

    def __init__(self, key: str, cause: str) -> None:
        self._cause = cause
        super().__init__(
            message=f"Failed to load configuration: {cause}",
            key=key,
        )

    @property
    def cause(self) -> str:
        return self._cause


# ---------------------------------------------------------------------------
# Read API errors
# ---------------------------------------------------------------------------

class ConfigNotFoundError(ConfigError):
    """Raised when a caller reads a key that never loaded successfully."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message="Configuration snapshot not found",
            key=key,
        )


class ConfigImmutableError(ConfigError, TypeError):
    """Raised on any write attempted through a configuration proxy."""

    def __init__(self, key: str | None = None) -> None:
        super().__init__(message="configuration is immutable", key=key)
