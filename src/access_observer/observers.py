"""
observers.py — the request and error observers.

Both observers are pipeline steps: they record what they need on the
request/response contexts, subscribe a deferred callback to a completion
signal and hand control to the next step straight away. The callback
decides, exactly once per response, whether a record is emitted.

    RequestObserver  -> fires on "finished", skipped once an error was handled
    ErrorObserver    -> fires on "headers", owns the record of a failed request
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from starlette.requests import Request

from access_observer import timing
from access_observer.config import settings
from access_observer.context import UNKNOWN_MILLIS, ResponseContext, request_context
from access_observer.formatting import default_error_message, default_request_message
from access_observer.options import MessageFn, MetaFn, ObserverOptions
from access_observer.sinks import Sink, as_sink
from access_observer.utils.logging import get_logger

log = get_logger(__name__)

R = TypeVar("R")


class _Observer:
    kind: str

    def __init__(self, sink: Sink, options: ObserverOptions) -> None:
        self.sink = sink
        self.options = options

    def _emit(self, *args: Any) -> None:
        try:
            self.sink(self.options.record(*args))
        except Exception:
            log.exception("access_log_dropped", observer=self.kind)

    def _is_silent(self, *args: Any) -> bool:
        try:
            return self.options.is_silent(*args)
        except Exception:
            log.exception("access_log_dropped", observer=self.kind)
            return True


class RequestObserver(_Observer):
    """Logs every request that completes without reaching the error path."""

    kind = "request"

    def __call__(
        self, request: Request, response: ResponseContext, call_next: Callable[[], R]
    ) -> R:
        timing.mark(request_context(request.scope))
        response.on_finished(lambda: self._settle(request, response))
        return call_next()

    def _settle(self, request: Request, response: ResponseContext) -> None:
        silent = self._is_silent(request, response)
        if response.error_handled or silent:
            return
        response.total_millis = timing.elapsed_millis(request_context(request.scope))
        self._emit(request, response)


class ErrorObserver(_Observer):
    """Logs requests that failed, once, in place of the request record."""

    kind = "error"

    def __call__(
        self,
        error: BaseException,
        request: Request,
        response: ResponseContext,
        call_next: Callable[[BaseException], R],
    ) -> R:
        response.error_handled = True
        response.total_millis = UNKNOWN_MILLIS
        response.on_headers(lambda: self._settle(error, request, response))
        return call_next(error)

    def _settle(
        self, error: BaseException, request: Request, response: ResponseContext
    ) -> None:
        if self._is_silent(error, request, response):
            return
        context = request_context(request.scope)
        if context.started_at is not None:
            response.total_millis = timing.elapsed_millis(context)
        self._emit(error, request, response)


def log_requests(
    logger: Any = None,
    *,
    silent: bool | Callable[..., bool] | None = None,
    level: str | Callable[..., str] | None = None,
    message: MessageFn | None = None,
    meta: MetaFn | None = None,
) -> RequestObserver:
    """Build a request observer writing to ``logger`` (structlog or callable)."""
    return RequestObserver(
        as_sink(logger),
        ObserverOptions.build(
            silent=silent,
            level=level,
            message=message,
            meta=meta,
            default_level=settings.request_log_level,
            default_message=default_request_message,
        ),
    )


def log_errors(
    logger: Any = None,
    *,
    silent: bool | Callable[..., bool] | None = None,
    level: str | Callable[..., str] | None = None,
    message: MessageFn | None = None,
    meta: MetaFn | None = None,
) -> ErrorObserver:
    """Build an error observer writing to ``logger`` (structlog or callable)."""
    return ErrorObserver(
        as_sink(logger),
        ObserverOptions.build(
            silent=silent,
            level=level,
            message=message,
            meta=meta,
            default_level=settings.error_log_level,
            default_message=default_error_message,
        ),
    )
