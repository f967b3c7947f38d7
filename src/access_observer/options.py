"""
options.py — resolution of observer options at emission time.

Every option slot is configured once, when the middleware is installed,
with either a constant or a decision function. At emission time the slot
is resolved with the same arguments the observer received:

    request observer:  (request, response)
    error observer:    (error, request, response)

``message`` is always a function and ``meta`` is an optional function.
Neither is evaluated when the event resolves as silent.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, TypeVar, Union

T = TypeVar("T")

MessageFn = Callable[..., Any]
MetaFn = Callable[..., Mapping[str, Any]]


@dataclass(frozen=True)
class Constant(Generic[T]):
    value: T

    def resolve(self, *args: Any) -> T:
        return self.value


@dataclass(frozen=True)
class Decision(Generic[T]):
    func: Callable[..., T]

    def resolve(self, *args: Any) -> T:
        return self.func(*args)


Option = Union[Constant[T], Decision[T]]


def as_option(value: T | Callable[..., T]) -> Option[T]:
    """Wrap a configured value into its variant."""
    if callable(value):
        return Decision(value)
    return Constant(value)


@dataclass(frozen=True)
class ObserverOptions:
    """The four resolved slots of one observer."""

    silent: Option[bool]
    level: Option[str]
    message: MessageFn
    meta: MetaFn | None = None

    @classmethod
    def build(
        cls,
        *,
        silent: bool | Callable[..., bool] | None,
        level: str | Callable[..., str] | None,
        message: MessageFn | None,
        meta: MetaFn | None,
        default_level: str,
        default_message: MessageFn,
    ) -> ObserverOptions:
        return cls(
            silent=as_option(False if silent is None else silent),
            level=as_option(level or default_level),
            message=message or default_message,
            meta=meta,
        )

    def is_silent(self, *args: Any) -> bool:
        return bool(self.silent.resolve(*args))

    def record(self, *args: Any) -> dict[str, Any]:
        """Build the log record; ``meta`` fields are merged last and win."""
        record: dict[str, Any] = {
            "level": self.level.resolve(*args),
            "message": self.message(*args),
        }
        if self.meta is not None:
            record.update(self.meta(*args))
        return record
