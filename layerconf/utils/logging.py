"""structlog setup for the configuration engine.

Every engine component takes an optional injected logger and otherwise
falls back to :func:`get_logger`, so a host application that configures
structlog itself keeps full control.  When nothing is configured,
:func:`configure_logging` installs one processor chain for both structlog
events (``config_module_loaded``, ``hot_reload_failed``, ...) and stdlib
records, rendered as coloured console lines in development and JSON lines
in production.

Output goes to stderr by default so the engine never writes into a host
program's stdout.  watchdog logs every raw filesystem event at DEBUG from
its observer thread; its stdlib loggers are held at WARNING or above unless
``watchdog_debug`` is set.
"""

import logging
import os
import sys
from typing import TextIO

import structlog

# Third-party loggers that report per-event detail at DEBUG.
_CHATTY_LOGGERS = ("watchdog",)


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False,
    app_env: str | None = None,
    stream: TextIO | None = None,
    watchdog_debug: bool = False,
) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger for the engine.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Force JSON lines regardless of the environment.
        app_env: Deployment environment; ``"production"`` selects JSON.
            Defaults to ``APP_ENV``, then ``"development"``.
        stream: Destination for rendered lines.  Defaults to stderr.
        watchdog_debug: Let watchdog's own DEBUG records through.

    Returns:
        A configured structlog BoundLogger.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {log_level!r}")
    out = stream or sys.stderr
    env_name = app_env or os.environ.get("APP_ENV", "development")
    use_json = json_output or env_name == "production"

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    # watchdog reports observer-thread failures through stdlib logging.
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *shared_processors,
            renderer,
        ],
    )
    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(level if watchdog_debug else max(level, logging.WARNING))

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound to *name*.

    Configures logging with defaults on first use if the host has not.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
