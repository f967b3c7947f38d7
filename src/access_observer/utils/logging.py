"""
utils/logging.py — structlog setup for access records.

The middleware only asks for loggers; it never configures logging on
import. Applications that do not configure structlog themselves can call
configure_access_logging() once at startup to get one line per request:

    console:  2024-05-01T10:00:00Z [info] 200 12 GET /health  logger=access_observer.access severity=info
    json:     {"message": "200 12 GET /health", "level": "info", "severity": "info", "logger": "access_observer.access", ...}

Usage:
    from access_observer.utils.logging import configure_access_logging, get_access_logger

    configure_access_logging(log_format="json")
    app = FastAPI(middleware=[log_requests_with(get_access_logger())])
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from access_observer.config import settings


def configure_access_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog to render access records.

    Leaves the standard library's root logger alone. JSON output names the
    event ``message`` so lines carry the same keys as the access record.

    Args:
        log_level:  Override settings.log_level ("DEBUG", "INFO", …).
        log_format: Override settings.log_format ("json" | "console").
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    fmt = log_format or settings.log_format

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if fmt == "json":
        processors += [
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """
    Return a lazy structlog logger that tags its records with ``logger=name``.

    Binding stays deferred until the first log call, so module-level loggers
    pick up whatever configuration is active by then.
    """
    return structlog.get_logger(name, logger=name, **initial_values)  # type: ignore[return-value]


def get_access_logger(**initial_values: Any) -> structlog.BoundLogger:
    """The logger access records go to when no logger is passed in."""
    return get_logger(settings.logger_name, **initial_values)
