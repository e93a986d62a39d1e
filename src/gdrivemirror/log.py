"""Structured logging for gdrivemirror (structlog over stdlib logging)."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

LOGGER_NAMESPACE = "gdrivemirror"


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """
    Configure structlog and the stdlib root handler.

    This changes process-wide logging, so it is left to the application to
    call once at startup; the library never calls it. ``json=True`` renders
    one JSON object per line, otherwise a human-readable console view.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    logging.getLogger(LOGGER_NAMESPACE).setLevel(log_level)


def set_logging_enabled(enabled: bool = True) -> None:
    """
    Switch the gdrivemirror loggers on or off.

    Only the ``gdrivemirror`` stdlib logger is touched: disabling raises it
    above CRITICAL and child loggers inherit the effective level.
    """
    stdlib_logger = logging.getLogger(LOGGER_NAMESPACE)
    if not enabled:
        stdlib_logger.setLevel(logging.CRITICAL + 1)
    elif stdlib_logger.level > logging.CRITICAL:
        stdlib_logger.setLevel(logging.NOTSET)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a bound structlog logger, normally ``get_logger(__name__)``.

    Output always goes to the stdlib logger of that name, so handlers and
    levels stay under the application's control. Processors are taken from
    the structlog configuration when the logger is first used.
    """
    return structlog.wrap_logger(
        logging.getLogger(name or LOGGER_NAMESPACE),
        wrapper_class=structlog.stdlib.BoundLogger,
    )
