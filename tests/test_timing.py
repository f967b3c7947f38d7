"""Tests for the start marker and elapsed-time rounding."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from access_observer import timing
from access_observer.context import RequestContext


def test_mark_keeps_first_marker():
    context = RequestContext()
    with patch("access_observer.timing.perf_counter_ns", side_effect=[100, 200]):
        timing.mark(context)
        timing.mark(context)
    assert context.started_at == 100


def test_unmarked_context_has_no_marker():
    assert RequestContext().started_at is None


@pytest.mark.parametrize(
    ("elapsed_ns", "expected"),
    [
        (1_000_100_000, 1001),  # 1000.1 ms rounds up
        (1_000_000_000, 1000),
        (1, 1),
        (0, 0),
    ],
)
def test_elapsed_rounds_up(elapsed_ns, expected):
    context = RequestContext(started_at=5_000)
    with patch("access_observer.timing.perf_counter_ns", return_value=5_000 + elapsed_ns):
        assert timing.elapsed_millis(context) == expected
