"""Structured access-log middleware.

Both classes are plain ASGI middleware so they see every message the app
sends. They drive the response's completion signals from ``send``:

    http.response.start            -> "headers" fires before it is sent
    http.response.body (last one)  -> "finished" fires after it was sent

Errors that the app answers itself (HTTPException, validation errors,
@app.exception_handler) never leave Starlette's ExceptionMiddleware, so
FastAPI apps install the error side after registering their handlers:

    app = FastAPI(middleware=[log_requests_with(logger)])
    app.add_exception_handler(Unavailable, render_unavailable)
    install_error_logging(app, logger)
"""

from __future__ import annotations

import functools
import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from access_observer.context import ResponseContext, response_context
from access_observer.observers import ErrorObserver, RequestObserver, log_errors, log_requests
from access_observer.utils.logging import get_logger

log = get_logger(__name__)

ErrorHandler = Callable[[Request, Exception], Any]


async def _answer(handler: ErrorHandler, request: Request, error: BaseException) -> Any:
    if inspect.iscoroutinefunction(handler):
        return await handler(request, error)
    reply = await run_in_threadpool(handler, request, error)
    if inspect.isawaitable(reply):
        reply = await reply
    return reply


def observe_send(response: ResponseContext, send: Send) -> Send:
    """Wrap ``send`` so the response's completion signals fire from it."""

    async def wrapped(message: Message) -> None:
        if message["type"] == "http.response.start":
            response.start(message)
            await send(message)
        elif message["type"] == "http.response.body":
            await send(message)
            if not message.get("more_body", False):
                response.finished.fire()
        else:
            await send(message)

    return wrapped


class _ObservingMiddleware(ABC):
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        response = response_context(scope)
        response.depth += 1
        try:
            await self.observe(request, response, receive, observe_send(response, send))
        finally:
            response.depth -= 1
            # The outermost observer settles responses the app left unfinished
            if response.depth == 0:
                response.settle()

    @abstractmethod
    async def observe(
        self,
        request: Request,
        response: ResponseContext,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the observer around the downstream app."""


class RequestLoggingMiddleware(_ObservingMiddleware):
    """Emit one record per completed request."""

    def __init__(self, app: ASGIApp, logger: Any = None, **options: Any) -> None:
        super().__init__(app)
        self.observer: RequestObserver = log_requests(logger, **options)
        log.debug("access_middleware_installed", observer="request")

    async def observe(
        self,
        request: Request,
        response: ResponseContext,
        receive: Receive,
        send: Send,
    ) -> None:
        await self.observer(
            request, response, lambda: self.app(request.scope, receive, send)
        )


class ErrorLoggingMiddleware(_ObservingMiddleware):
    """
    Emit one record per request that raised downstream.

    The error goes on to ``handler(request, exc)`` when one is configured
    and nothing was sent yet; otherwise it is re-raised unchanged.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: Any = None,
        *,
        handler: ErrorHandler | None = None,
        observer: ErrorObserver | None = None,
        **options: Any,
    ) -> None:
        super().__init__(app)
        self.handler = handler
        self.observer: ErrorObserver = observer or log_errors(logger, **options)
        log.debug("access_middleware_installed", observer="error", handler=handler is not None)

    async def observe(
        self,
        request: Request,
        response: ResponseContext,
        receive: Receive,
        send: Send,
    ) -> None:
        try:
            await self.app(request.scope, receive, send)
        except Exception as exc:

            async def forward(error: BaseException) -> None:
                if self.handler is None or response.headers_sent.fired:
                    raise error
                reply = await _answer(self.handler, request, error)
                await reply(request.scope, receive, send)

            await self.observer(exc, request, response, forward)


def log_requests_with(logger: Any = None, **options: Any) -> Middleware:
    """Middleware entry for the request observer."""
    return Middleware(RequestLoggingMiddleware, logger=logger, **options)


def log_errors_with(logger: Any = None, **options: Any) -> Middleware:
    """Middleware entry for the error observer."""
    return Middleware(ErrorLoggingMiddleware, logger=logger, **options)


def observe_exception_handler(observer: ErrorObserver, handler: ErrorHandler) -> ErrorHandler:
    """
    Wrap an app exception handler so ``observer`` sees the error first.

    The handler's reply goes out through the observing middleware, whose
    ``send`` fires the signals the observer waits on.
    """
    if getattr(handler, "__access_observer__", None) is observer:
        return handler

    @functools.wraps(handler)
    async def observed(request: Request, exc: Exception) -> Any:
        if request.scope["type"] != "http":
            return await _answer(handler, request, exc)
        response = response_context(request.scope)
        return await observer(
            exc, request, response, lambda error: _answer(handler, request, error)
        )

    observed.__access_observer__ = observer  # type: ignore[attr-defined]
    return observed


def install_error_logging(
    app: Starlette,
    logger: Any = None,
    *,
    handler: ErrorHandler | None = None,
    **options: Any,
) -> ErrorObserver:
    """
    Log every failed request of ``app`` through one error observer.

    Handlers already in ``app.exception_handlers`` are wrapped, so errors
    the app answers itself are logged too. Call it after registering them
    and before the app serves its first request. Errors no handler claims
    are left to an ``ErrorLoggingMiddleware`` added here; the ``500`` /
    ``Exception`` handler runs outside all middleware and stays unwrapped.
    """
    observer = log_errors(logger, **options)
    for key, current in list(app.exception_handlers.items()):
        if key in (500, Exception):
            continue
        app.exception_handlers[key] = observe_exception_handler(observer, current)
    app.add_middleware(ErrorLoggingMiddleware, observer=observer, handler=handler)
    log.debug(
        "access_error_logging_installed",
        handlers=[getattr(key, "__name__", key) for key in app.exception_handlers],
    )
    return observer

