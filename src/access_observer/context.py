"""Per-request and per-response observation state.

Both contexts live in the ASGI ``scope["state"]`` side-table, so they are
shared by every observer that sees the same request and are dropped with
the scope once the request is done.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, MutableMapping

from starlette.datastructures import Headers

from access_observer.signals import CompletionSignal, Listener

UNKNOWN_MILLIS = -1

_REQUEST_KEY = "access_observer.request"
_RESPONSE_KEY = "access_observer.response"


@dataclass
class RequestContext:
    started_at: int | None = None


@dataclass
class ResponseContext:
    status_code: int | None = None
    headers: Headers = field(default_factory=Headers)
    total_millis: int = UNKNOWN_MILLIS
    error_handled: bool = False
    headers_sent: CompletionSignal = field(
        default_factory=lambda: CompletionSignal("headers"), repr=False
    )
    finished: CompletionSignal = field(
        default_factory=lambda: CompletionSignal("finished"), repr=False
    )
    depth: int = field(default=0, repr=False)

    def on_headers(self, listener: Listener) -> None:
        self.headers_sent.subscribe(listener)

    def on_finished(self, listener: Listener) -> None:
        self.finished.subscribe(listener)

    def start(self, message: MutableMapping[str, Any]) -> None:
        """Take status and headers from ``http.response.start`` and fire ``headers``."""
        self.status_code = message["status"]
        self.headers = Headers(raw=message.get("headers") or [])
        self.headers_sent.fire()

    def settle(self, status_code: int = 500) -> None:
        """Finish a response the app never completed (error or disconnect)."""
        if not self.headers_sent.fired:
            if self.status_code is None:
                self.status_code = status_code
            self.headers_sent.fire()
        self.finished.fire()


def _state(scope: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    return scope.setdefault("state", {})


def request_context(scope: MutableMapping[str, Any]) -> RequestContext:
    return _state(scope).setdefault(_REQUEST_KEY, RequestContext())


def response_context(scope: MutableMapping[str, Any]) -> ResponseContext:
    return _state(scope).setdefault(_RESPONSE_KEY, ResponseContext())
