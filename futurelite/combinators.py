"""Combinators over ``Future``.

Every combinator polls its children synchronously, in sequence, inside its own
``poll``; none of them introduces parallelism. A child that has completed is
never polled again.

Examples::

    from futurelite import block_on, pending, race, ready, zip

    assert block_on(zip(ready(1), ready(2))) == (1, 2)
    assert block_on(race(ready(1), pending())) == 1
    assert block_on(ready(1).or_(ready(2))) == 1
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Coroutine
from typing import Any, Generic, Protocol, TypeVar, Union

from futurelite.config import get_config
from futurelite.future import Future, into_future
from futurelite.outcome import NOTHING, Err, Maybe, Ok, Result, Some
from futurelite.poll import PENDING, Context, Poll, Ready, Waker

T = TypeVar("T")
T1 = TypeVar("T1")
T2 = TypeVar("T2")
S = TypeVar("S")

FutureLike = Union[Future[T], Coroutine[Any, Any, T]]


class RandomBits(Protocol):
    """Anything with ``random.Random.getrandbits``."""

    def getrandbits(self, k: int, /) -> int: ...


# =========================================================
# Leaf futures
# =========================================================


class ReadyFuture(Future[T]):
    """Future for :func:`ready`."""

    def __init__(self, value: T) -> None:
        self._value: T | None = value

    def _poll(self, cx: Context) -> Poll[T]:
        value, self._value = self._value, None
        return Ready(value)

    def __repr__(self) -> str:
        return f"ReadyFuture({self._value!r})"


def ready(value: T) -> ReadyFuture[T]:
    """Create a future that resolves to ``value``."""

    return ReadyFuture(value)


class PendingFuture(Future[Any]):
    """Future for :func:`pending`; never completes."""

    def _poll(self, cx: Context) -> Poll[Any]:
        return PENDING

    def __repr__(self) -> str:
        return "PendingFuture()"


def pending() -> PendingFuture:
    return PendingFuture()


class PollFn(Future[T]):
    """Future for :func:`poll_fn`."""

    def __init__(self, f: Callable[[Context], Poll[T]], *, send: bool = True) -> None:
        self._f = f
        self._send = send

    @property
    def is_send(self) -> bool:
        return self._send

    def _poll(self, cx: Context) -> Poll[T]:
        return self._f(cx)

    def __repr__(self) -> str:
        return "PollFn()"


def poll_fn(f: Callable[[Context], Poll[T]], *, send: bool = True) -> PollFn[T]:
    """Create a future whose ``poll`` is ``f(cx)``."""

    return PollFn(f, send=send)


class PollState(Future[T], Generic[S, T]):
    """Future for :func:`poll_state`.

    ``state`` stays in the future between polls; ``f`` may mutate it in place.
    """

    def __init__(self, state: S, f: Callable[[S, Context], Poll[T]]) -> None:
        self.state = state
        self._f = f

    def _poll(self, cx: Context) -> Poll[T]:
        return self._f(self.state, cx)

    def __repr__(self) -> str:
        return f"PollState({self.state!r})"


def poll_state(state: S, f: Callable[[S, Context], Poll[T]]) -> PollState[S, T]:
    """Create a future whose ``poll`` is ``f(state, cx)``."""

    return PollState(state, f)


def _current_waker(cx: Context) -> Poll[Waker]:
    return Ready(cx.waker.clone())


def waker() -> PollFn[Waker]:
    """Resolve immediately to the waker of the task polling this future."""

    return PollFn(_current_waker)


class Sleep(Future[None]):
    """Future for :func:`sleep`."""

    def __init__(self) -> None:
        self._slept = False

    def _poll(self, cx: Context) -> Poll[None]:
        if not self._slept:
            self._slept = True
            return PENDING
        return Ready(None)

    def __repr__(self) -> str:
        return f"Sleep(slept={self._slept})"


def sleep() -> Sleep:
    """Return ``PENDING`` once without scheduling a wake, then complete.

    The task only resumes when something else wakes it.
    """

    return Sleep()


class YieldNow(Future[None]):
    """Future for :func:`yield_now`."""

    def __init__(self) -> None:
        self._yielded = False

    def _poll(self, cx: Context) -> Poll[None]:
        if not self._yielded:
            self._yielded = True
            cx.waker.wake_by_ref()
            return PENDING
        return Ready(None)

    def __repr__(self) -> str:
        return f"YieldNow(yielded={self._yielded})"


def yield_now() -> YieldNow:
    """Wake the current task and return ``PENDING`` once.

    Yield inside long loops so other work sharing the driver gets a turn::

        async def work():
            for step in range(3):
                print("step", step)
                await yield_now()
    """

    return YieldNow()


# =========================================================
# Wrappers
# =========================================================


class PollOnce(Future[Maybe[T]]):
    """Future for :func:`poll_once`."""

    def __init__(self, future: Future[T]) -> None:
        self._future = future

    @property
    def is_send(self) -> bool:
        return self._future.is_send

    def _poll(self, cx: Context) -> Poll[Maybe[T]]:
        result = self._future.poll(cx)
        if isinstance(result, Ready):
            return Ready(Some(result.value))
        return Ready(NOTHING)

    def __repr__(self) -> str:
        return "PollOnce()"


def poll_once(future: FutureLike[T]) -> PollOnce[T]:
    """Poll ``future`` exactly once and resolve to ``Some(value)`` or ``NOTHING``.

    If the inner future was pending it is not polled again through the
    wrapper; keep your own reference to resume it.
    """

    return PollOnce(into_future(future))


class _Pair(Future[T]):
    """Shared shape of the two-child combinators."""

    def __init__(self, future1: Future[Any], future2: Future[Any]) -> None:
        self._future1 = future1
        self._future2 = future2

    @property
    def is_send(self) -> bool:
        return self._future1.is_send and self._future2.is_send

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._future1!r}, {self._future2!r})"


# =========================================================
# Zip
# =========================================================


class Zip(_Pair[tuple[T1, T2]]):
    """Future for :func:`zip`."""

    def __init__(self, future1: Future[T1], future2: Future[T2]) -> None:
        super().__init__(future1, future2)
        self._output1: Maybe[T1] = NOTHING
        self._output2: Maybe[T2] = NOTHING

    def _poll(self, cx: Context) -> Poll[tuple[T1, T2]]:
        if self._output1.is_none():
            result1 = self._future1.poll(cx)
            if isinstance(result1, Ready):
                self._output1 = Some(result1.value)

        if self._output2.is_none():
            result2 = self._future2.poll(cx)
            if isinstance(result2, Ready):
                self._output2 = Some(result2.value)

        if self._output1.is_some() and self._output2.is_some():
            value1, value2 = self._output1.unwrap(), self._output2.unwrap()
            self._output1 = self._output2 = NOTHING
            return Ready((value1, value2))
        return PENDING


def zip(future1: FutureLike[T1], future2: FutureLike[T2]) -> Zip[T1, T2]:
    """Wait for both futures and resolve to the pair of their outputs."""

    return Zip(into_future(future1), into_future(future2))


def _expect_result(value: Any, side: str) -> Result[Any]:
    if not isinstance(value, Result):
        raise TypeError(
            f"try_zip {side} future must resolve to Ok or Err, got {type(value).__name__}"
        )
    return value


class TryZip(_Pair[Result[tuple[T1, T2]]]):
    """Future for :func:`try_zip`.

    The left future is polled first, so if both fail during the same poll
    the left error is the one returned.
    """

    def __init__(
        self, future1: Future[Result[T1]], future2: Future[Result[T2]]
    ) -> None:
        super().__init__(future1, future2)
        self._output1: Maybe[T1] = NOTHING
        self._output2: Maybe[T2] = NOTHING

    def _poll(self, cx: Context) -> Poll[Result[tuple[T1, T2]]]:
        if self._output1.is_none():
            result1 = self._future1.poll(cx)
            if isinstance(result1, Ready):
                out = _expect_result(result1.value, "left")
                if isinstance(out, Err):
                    return Ready(out)
                self._output1 = Some(out.unwrap())

        if self._output2.is_none():
            result2 = self._future2.poll(cx)
            if isinstance(result2, Ready):
                out = _expect_result(result2.value, "right")
                if isinstance(out, Err):
                    return Ready(out)
                self._output2 = Some(out.unwrap())

        if self._output1.is_some() and self._output2.is_some():
            value1, value2 = self._output1.unwrap(), self._output2.unwrap()
            self._output1 = self._output2 = NOTHING
            return Ready(Ok((value1, value2)))
        return PENDING


def try_zip(
    future1: FutureLike[Result[T1]], future2: FutureLike[Result[T2]]
) -> TryZip[T1, T2]:
    """Wait for two fallible futures, stopping at the first ``Err``.

    The other future is not notified; it is dropped with the combinator.
    """

    return TryZip(into_future(future1), into_future(future2))


# =========================================================
# Race / Or
# =========================================================

_default_rng_lock = threading.Lock()
_default_rng_cache: tuple[int | None, random.Random] | None = None


def _default_rng() -> random.Random:
    global _default_rng_cache
    seed = get_config().race_seed
    with _default_rng_lock:
        if _default_rng_cache is None or _default_rng_cache[0] != seed:
            _default_rng_cache = (seed, random.Random(seed))
        return _default_rng_cache[1]


class Race(_Pair[T]):
    """Future for :func:`race`."""

    def __init__(
        self, future1: Future[T], future2: Future[T], rng: RandomBits
    ) -> None:
        super().__init__(future1, future2)
        self._rng = rng

    def _poll(self, cx: Context) -> Poll[T]:
        if self._rng.getrandbits(1):
            first, second = self._future1, self._future2
        else:
            first, second = self._future2, self._future1

        result = first.poll(cx)
        if isinstance(result, Ready):
            return result
        result = second.poll(cx)
        if isinstance(result, Ready):
            return result
        return PENDING


def race(
    future1: FutureLike[T],
    future2: FutureLike[T],
    *,
    rng: RandomBits | None = None,
) -> Race[T]:
    """Resolve to the output of whichever future completes first.

    Each poll picks a fresh random order for the two futures and stops at the
    first one that completes, so neither side is favoured over many polls.
    When both are ready in the same poll, that poll's order decides. Use
    :func:`or_` when one side should win ties.

    ``rng`` defaults to a module-wide ``random.Random``, seeded from
    ``FUTURELITE_RACE_SEED`` when that is set.
    """

    if rng is None:
        rng = _default_rng()
    return Race(into_future(future1), into_future(future2), rng)


class Or(_Pair[T]):
    """Future for :func:`or_`."""

    def _poll(self, cx: Context) -> Poll[T]:
        result = self._future1.poll(cx)
        if isinstance(result, Ready):
            return result
        result = self._future2.poll(cx)
        if isinstance(result, Ready):
            return result
        return PENDING


def or_(future1: FutureLike[T], future2: FutureLike[T]) -> Or[T]:
    """Resolve to the output of ``future1`` or ``future2``, preferring ``future1``."""

    return Or(into_future(future1), into_future(future2))


__all__ = [
    "Or",
    "PendingFuture",
    "PollFn",
    "PollOnce",
    "PollState",
    "Race",
    "RandomBits",
    "ReadyFuture",
    "Sleep",
    "TryZip",
    "YieldNow",
    "Zip",
    "or_",
    "pending",
    "poll_fn",
    "poll_once",
    "poll_state",
    "race",
    "ready",
    "sleep",
    "try_zip",
    "waker",
    "yield_now",
    "zip",
]
