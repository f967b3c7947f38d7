"""Log sinks that accept resolved access records."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from access_observer.utils.logging import get_access_logger

Sink = Callable[[Mapping[str, Any]], None]


def severity_to_level(token: str) -> int | None:
    """Map a severity token to a stdlib level number, or None if unknown."""
    level = logging.getLevelName(str(token).upper())
    return level if isinstance(level, int) else None


class StructlogSink:
    """
    Emit access records through a structlog logger.

    ``message`` becomes the event and every other field is passed as a
    keyword. The severity token is always kept in a ``severity`` field;
    tokens without a stdlib level are logged at INFO. A ``meta`` field
    named ``event`` would clash with the event itself and is renamed to
    ``meta_event``.
    """

    def __init__(self, logger: Any) -> None:
        self.logger = logger

    def __call__(self, record: Mapping[str, Any]) -> None:
        fields = dict(record)
        token = fields.pop("level")
        message = fields.pop("message")
        if "event" in fields:
            fields["meta_event"] = fields.pop("event")
        fields.setdefault("severity", token)
        level = severity_to_level(token)
        self.logger.log(logging.INFO if level is None else level, str(message), **fields)


def as_sink(target: Any = None) -> Sink:
    """Turn a structlog logger, a plain callable or None into a sink."""
    if target is None:
        return StructlogSink(get_access_logger())
    if hasattr(target, "log"):
        return StructlogSink(target)
    if callable(target):
        return target
    raise TypeError(f"Cannot log access records to {target!r}")

