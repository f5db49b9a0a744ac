"""Logging configuration using structlog.

Called once by the process entry point before the startup readiness gate
runs, so gate output is already structured.
"""

import logging
import sys

import structlog

from app.core.config import get_settings

# httpx logs every request at INFO; readiness probes would flood startup logs.
_QUIET_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog for the service."""
    settings = get_settings()
    log_level = getattr(logging, (level or settings.app.log_level.value).upper())

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            _renderer(settings.observability.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=settings.app.name, env=settings.app.env.value)
