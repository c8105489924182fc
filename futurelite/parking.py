"""Thread parking with token semantics.

``unpark`` leaves a single token behind. ``park`` consumes the token, waiting
for one only if none is available, so an unpark that lands before the thread
parks is never lost. Several unparks before a park coalesce into one token.
"""

from __future__ import annotations

import threading


class _Inner:
    __slots__ = ("cond", "notified")

    def __init__(self) -> None:
        self.cond = threading.Condition(threading.Lock())
        self.notified = False


class Parker:
    """Parks the thread that owns it until an ``Unparker`` hands over a token."""

    __slots__ = ("_inner",)

    def __init__(self) -> None:
        self._inner = _Inner()

    def park(self) -> None:
        inner = self._inner
        with inner.cond:
            while not inner.notified:
                inner.cond.wait()
            inner.notified = False

    def park_timeout(self, timeout: float) -> bool:
        """Park for at most ``timeout`` seconds; return whether a token was consumed."""

        inner = self._inner
        with inner.cond:
            if not inner.notified:
                inner.cond.wait_for(lambda: inner.notified, timeout)
            notified = inner.notified
            inner.notified = False
            return notified

    def unpark(self) -> None:
        self.unparker().unpark()

    def unparker(self) -> Unparker:
        return Unparker(self._inner)

    def __repr__(self) -> str:
        return f"Parker(notified={self._inner.notified})"


class Unparker:
    """Hands a token to its ``Parker``. Safe to call from any thread."""

    __slots__ = ("_inner",)

    def __init__(self, inner: _Inner) -> None:
        self._inner = inner

    def unpark(self) -> None:
        inner = self._inner
        with inner.cond:
            inner.notified = True
            inner.cond.notify()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Unparker) and other._inner is self._inner

    def __hash__(self) -> int:
        return id(self._inner)

    def __repr__(self) -> str:
        return "Unparker()"


def parker_and_unparker() -> tuple[Parker, Unparker]:
    parker = Parker()
    return parker, parker.unparker()


__all__ = ["Parker", "Unparker", "parker_and_unparker"]
