"""Start marker and elapsed-time computation."""

from __future__ import annotations

from time import perf_counter_ns
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from access_observer.context import RequestContext

_NANOS_PER_MILLI = 1_000_000


def mark(context: RequestContext) -> None:
    """Record the monotonic start marker once; later calls keep the first."""
    if context.started_at is None:
        context.started_at = perf_counter_ns()


def elapsed_millis(context: RequestContext) -> int:
    """
    Whole milliseconds since ``context.started_at``, rounded up.

    The marker must be set; callers that can run without one check
    ``context.started_at`` first and keep the duration unknown.
    """
    elapsed = perf_counter_ns() - context.started_at
    return -(-elapsed // _NANOS_PER_MILLI)
