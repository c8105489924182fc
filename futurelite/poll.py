"""Poll results, wakers and the polling context.

A poll either produces ``Ready(value)`` or the ``PENDING`` singleton. A
``Waker`` is the handle a pending future keeps so that whoever makes progress
possible can ask the driver to poll again.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
U = TypeVar("U")


class PollBase(Generic[T_co]):
    """Sum type of a single poll attempt: ``Ready`` or ``Pending``."""

    __slots__ = ()

    def is_ready(self) -> bool:
        return isinstance(self, Ready)

    def is_pending(self) -> bool:
        return isinstance(self, Pending)

    def map(self, f: Callable[[T_co], U]) -> Poll[U]:
        """Apply ``f`` to the value of a ``Ready`` poll, leave ``PENDING`` alone."""

        if isinstance(self, Ready):
            return Ready(f(self.value))
        return PENDING


@dataclass(frozen=True)
class Ready(PollBase[T], Generic[T]):
    """The future completed with ``value``."""

    value: T


class Pending(PollBase[NoReturn]):
    """Singleton meaning "not yet, poll me again after a wake"."""

    __slots__ = ()
    _instance: Pending | None = None

    def __new__(cls) -> Pending:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "PENDING"


PENDING: Final[Pending] = Pending()

Poll = Union[Ready[T], Pending]


class Waker:
    """Shareable wake handle.

    Invoking it only forwards to the wrapped callable, so it is as thread-safe
    as that callable. It may be called any number of times, re-entrantly from
    inside the poll that received it, and after the task has completed.
    """

    __slots__ = ("_wake",)

    def __init__(self, wake: Callable[[], object]) -> None:
        if not callable(wake):
            raise TypeError(f"wake must be callable, got {type(wake).__name__}")
        self._wake = wake

    @classmethod
    def noop(cls) -> Waker:
        """A waker that does nothing when woken."""

        return _NOOP_WAKER

    def wake(self) -> None:
        self._wake()

    def wake_by_ref(self) -> None:
        """Same as :meth:`wake`; the waker stays usable afterwards either way."""

        self._wake()

    def clone(self) -> Waker:
        return Waker(self._wake)

    def will_wake(self, other: Waker) -> bool:
        """Return ``True`` if ``other`` wakes the same task as ``self``."""

        return self._wake == other._wake

    def __repr__(self) -> str:
        return f"Waker({self._wake!r})"


def _noop() -> None:
    return None


_NOOP_WAKER: Final[Waker] = Waker(_noop)


def waker_fn(f: Callable[[], object]) -> Waker:
    """Build a ``Waker`` that calls ``f`` on every wake."""

    return Waker(f)


class Context:
    """What a future sees while being polled: currently just its waker."""

    __slots__ = ("_waker",)

    def __init__(self, waker: Waker) -> None:
        self._waker = waker

    @classmethod
    def from_waker(cls, waker: Waker) -> Context:
        return cls(waker)

    @property
    def waker(self) -> Waker:
        return self._waker

    def __repr__(self) -> str:
        return f"Context(waker={self._waker!r})"


__all__ = [
    "PENDING",
    "Context",
    "Pending",
    "Poll",
    "PollBase",
    "Ready",
    "Waker",
    "waker_fn",
]
