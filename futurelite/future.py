"""The ``Future`` base class and the bridge to native coroutines.

A ``Future`` is a state machine advanced by ``poll``. Subclasses implement
``_poll``; the public ``poll`` enforces that nothing polls a future again
once it has returned ``Ready``.

Native ``async def`` coroutines are adapted with :class:`CoroutineFuture`.
Inside such a coroutine any ``Future`` can be awaited::

    async def main():
        a, b = await zip(ready(1), ready(2))
        return a + b

    assert block_on(main()) == 3
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Coroutine, Generator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from futurelite.errors import ForeignAwaitableError, PolledAfterCompletionError
from futurelite.poll import PENDING, Context, Pending, Poll, Ready

if TYPE_CHECKING:
    from futurelite.boxed import Boxed, BoxedLocal
    from futurelite.combinators import RandomBits
    from futurelite.outcome import Maybe, Result

T = TypeVar("T")
U = TypeVar("U")


class _Signal:
    """Private value passed between ``Future.__await__`` and ``CoroutineFuture``."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<futurelite {self.name}>"


_NEED_CONTEXT = _Signal("need-context")
_PENDING_SIGNAL = _Signal("pending")


class Future(ABC, Generic[T]):
    """A suspendable computation producing a ``T``."""

    _completed: bool = False

    def poll(self, cx: Context) -> Poll[T]:
        """Attempt to advance the computation once."""

        if self._completed:
            raise PolledAfterCompletionError(self)
        result = self._poll(cx)
        if isinstance(result, Ready):
            self._completed = True
        elif not isinstance(result, Pending):
            raise TypeError(
                f"{type(self).__name__}._poll must return Ready or PENDING, "
                f"got {type(result).__name__}"
            )
        return result

    @abstractmethod
    def _poll(self, cx: Context) -> Poll[T]:
        ...

    @property
    def is_terminated(self) -> bool:
        """``True`` once ``poll`` has returned ``Ready``."""

        return self._completed

    @property
    def is_send(self) -> bool:
        """Whether this future may be handed to another thread."""

        return True

    def __await__(self) -> Generator[Any, Any, T]:
        cx = yield _NEED_CONTEXT
        while True:
            result = self.poll(cx)
            if isinstance(result, Ready):
                return result.value
            cx = yield _PENDING_SIGNAL

    # -----------------------------------------------------------------
    # Combinator methods
    # -----------------------------------------------------------------

    def or_(self, other: Future[T] | Coroutine[Any, Any, T]) -> Future[T]:
        """Return the output of ``self`` or ``other``, preferring ``self`` if both are ready.

        For a choice without preference use :meth:`race`.
        """
        from futurelite.combinators import or_

        return or_(self, other)

    def race(
        self,
        other: Future[T] | Coroutine[Any, Any, T],
        rng: RandomBits | None = None,
    ) -> Future[T]:
        """Return the output of whichever of ``self`` and ``other`` completes first."""
        from futurelite.combinators import race

        return race(self, other, rng=rng)

    def zip(self, other: Future[U] | Coroutine[Any, Any, U]) -> Future[tuple[T, U]]:
        from futurelite.combinators import zip

        return zip(self, other)

    def try_zip(self, other: Future[Result[U]] | Coroutine[Any, Any, Result[U]]) -> Future[Result[tuple[Any, U]]]:
        from futurelite.combinators import try_zip

        return try_zip(self, other)

    def poll_once(self) -> Future[Maybe[T]]:
        from futurelite.combinators import poll_once

        return poll_once(self)

    def boxed(self) -> Boxed[T]:
        """Erase this future into a handle that may be polled from any thread."""
        from futurelite.boxed import Boxed

        return Boxed(self)

    def boxed_local(self) -> BoxedLocal[T]:
        """Erase this future into a handle bound to a single thread."""
        from futurelite.boxed import BoxedLocal

        return BoxedLocal(self)


class CoroutineFuture(Future[T]):
    """Drives a native coroutine through the poll protocol.

    The coroutine may only await futurelite futures (directly or through
    other coroutines). Each poll resumes it until its innermost awaited
    future reports ``PENDING`` or the coroutine returns.
    """

    def __init__(self, coro: Coroutine[Any, Any, T], *, send: bool = True) -> None:
        if not inspect.iscoroutine(coro):
            raise TypeError(f"Expected a coroutine, got {type(coro).__name__}")
        self._coro = coro
        self._started = False
        self._send = send

    @property
    def is_send(self) -> bool:
        return self._send

    def _poll(self, cx: Context) -> Poll[T]:
        try:
            if self._started:
                signal = self._coro.send(cx)
            else:
                self._started = True
                signal = self._coro.send(None)
            while signal is _NEED_CONTEXT:
                signal = self._coro.send(cx)
        except StopIteration as stop:
            return Ready(stop.value)
        if signal is not _PENDING_SIGNAL:
            self._coro.close()
            raise ForeignAwaitableError(signal)
        return PENDING

    def __del__(self) -> None:
        """Close a coroutine that was dropped before its first poll."""
        coro = getattr(self, "_coro", None)
        if coro is not None and not getattr(self, "_started", True):
            coro.close()

    def __repr__(self) -> str:
        return f"CoroutineFuture({self._coro.__qualname__})"


def into_future(obj: Future[T] | Coroutine[Any, Any, T]) -> Future[T]:
    """Normalize a future or a native coroutine into a ``Future``."""

    if isinstance(obj, Future):
        return obj
    if inspect.iscoroutine(obj):
        return CoroutineFuture(obj)
    raise TypeError(
        f"Expected a futurelite Future or a coroutine, got {type(obj).__name__}"
    )


__all__ = [
    "CoroutineFuture",
    "Future",
    "into_future",
]
