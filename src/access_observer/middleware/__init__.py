from access_observer.middleware.logging import (
    ErrorLoggingMiddleware,
    RequestLoggingMiddleware,
    install_error_logging,
    log_errors_with,
    log_requests_with,
    observe_exception_handler,
)

__all__ = [
    "ErrorLoggingMiddleware",
    "RequestLoggingMiddleware",
    "install_error_logging",
    "log_errors_with",
    "log_requests_with",
    "observe_exception_handler",
]
