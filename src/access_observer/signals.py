"""One-shot completion signals for a single response."""

from __future__ import annotations

from typing import Callable

Listener = Callable[[], None]


class CompletionSignal:
    """
    A lifecycle milestone of one response that happens at most once.

    Listeners subscribed before the milestone run when it fires, in
    subscription order. A listener subscribed after it fired runs
    immediately, so every listener runs exactly once.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.fired = False
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if self.fired:
            listener()
            return
        self._listeners.append(listener)

    def fire(self) -> None:
        if self.fired:
            return
        self.fired = True
        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()

    def __repr__(self) -> str:
        state = "fired" if self.fired else f"{len(self._listeners)} pending"
        return f"<CompletionSignal {self.name} ({state})>"
