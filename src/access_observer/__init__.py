"""
access_observer — structured access logs for ASGI applications.

Usage:
    from access_observer import log_errors_with, log_requests_with
    from access_observer.responses import default_error_handler

    app = FastAPI(middleware=[
        log_requests_with(logger, level="info"),
        log_errors_with(logger, handler=default_error_handler),
    ])
"""

from access_observer.context import ResponseContext
from access_observer.middleware import (
    ErrorLoggingMiddleware,
    RequestLoggingMiddleware,
    install_error_logging,
    log_errors_with,
    log_requests_with,
)
from access_observer.sinks import StructlogSink

__version__ = "0.1.0"

__all__ = [
    "ErrorLoggingMiddleware",
    "RequestLoggingMiddleware",
    "ResponseContext",
    "StructlogSink",
    "install_error_logging",
    "log_errors_with",
    "log_requests_with",
]
