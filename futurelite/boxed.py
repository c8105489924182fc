"""Type-erased owned handles.

``Boxed`` and ``BoxedLocal`` both hide the concrete future type behind one
uniform type, so futures of different shapes can live in the same collection::

    futures = [ready("a").boxed(), pending().boxed()]

``Boxed`` may travel between threads; ``BoxedLocal`` is bound to the first
thread that polls it.
"""

from __future__ import annotations

import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from futurelite.errors import NotSendError, WrongThreadError
from futurelite.future import Future, into_future
from futurelite.poll import Context, Poll

T = TypeVar("T")


class Boxed(Future[T]):
    """Thread-transferable handle. Polls are serialized by an internal lock."""

    def __init__(self, future: Future[T] | Coroutine[Any, Any, T]) -> None:
        inner = into_future(future)
        if not inner.is_send:
            raise NotSendError(inner)
        self._future = inner
        self._lock = threading.Lock()

    def _poll(self, cx: Context) -> Poll[T]:
        with self._lock:
            return self._future.poll(cx)

    def __repr__(self) -> str:
        return f"Boxed({self._future!r})"


class BoxedLocal(Future[T]):
    """Handle owned by a single thread; never ``is_send``."""

    def __init__(self, future: Future[T] | Coroutine[Any, Any, T]) -> None:
        self._future = into_future(future)
        self._owner: int | None = None

    @property
    def is_send(self) -> bool:
        return False

    @property
    def owner(self) -> int | None:
        """Ident of the thread that first polled this handle."""

        return self._owner

    def _poll(self, cx: Context) -> Poll[T]:
        current = threading.get_ident()
        if self._owner is None:
            self._owner = current
        elif self._owner != current:
            raise WrongThreadError(self._owner, current)
        return self._future.poll(cx)

    def __repr__(self) -> str:
        return f"BoxedLocal({self._future!r})"


def boxed(future: Future[T] | Coroutine[Any, Any, T]) -> Boxed[T]:
    return Boxed(future)


def boxed_local(future: Future[T] | Coroutine[Any, Any, T]) -> BoxedLocal[T]:
    return BoxedLocal(future)


__all__ = ["Boxed", "BoxedLocal", "boxed", "boxed_local"]
