"""Default access-log messages."""

from __future__ import annotations

from starlette.requests import Request

from access_observer.context import ResponseContext


def request_target(request: Request) -> str:
    """Path plus query string, as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def default_request_message(request: Request, response: ResponseContext) -> str:
    return (
        f"{response.status_code} {response.total_millis} "
        f"{request.method} {request_target(request)}"
    )


def default_error_message(
    error: BaseException, request: Request, response: ResponseContext
) -> str:
    millis = response.total_millis if response.total_millis >= 0 else "-"
    return f"{response.status_code} {millis} {request.method} {request_target(request)}"
