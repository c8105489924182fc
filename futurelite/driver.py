"""Blocking driver: run one future to completion on the calling thread."""

from __future__ import annotations

import logging
import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from futurelite.config import get_config
from futurelite.future import Future, into_future
from futurelite.parking import Parker, parker_and_unparker
from futurelite.poll import Context, Ready, Waker, waker_fn
from futurelite.trace import Traced

T = TypeVar("T")

logger = logging.getLogger(__name__)


def parker_and_waker() -> tuple[Parker, Waker]:
    """Create a parker and a waker that unparks it."""
    parker, unparker = parker_and_unparker()
    return parker, waker_fn(unparker.unpark)


class _ThreadCache:
    """Parker and waker reused by every ``block_on`` on one thread."""

    __slots__ = ("in_use", "parker", "waker")

    def __init__(self) -> None:
        self.parker, self.waker = parker_and_waker()
        self.in_use = False


_local = threading.local()


def _thread_cache() -> _ThreadCache:
    cache = getattr(_local, "cache", None)
    if cache is None:
        cache = _ThreadCache()
        _local.cache = cache
    return cache


def _drive(future: Future[T], parker: Parker, waker: Waker) -> T:
    cx = Context(waker)
    while True:
        result = future.poll(cx)
        if isinstance(result, Ready):
            return result.value
        parker.park()


def block_on(future: Future[T] | Coroutine[Any, Any, T]) -> T:
    """Block the current thread on a future and return its output.

    Accepts a ``Future`` or a native coroutine::

        async def add():
            return 1 + 2

        assert block_on(add()) == 3

    Calling ``block_on`` from inside a future that is itself being driven by
    ``block_on`` on the same thread is allowed; the nested call gets its own
    parker and waker so it never steals the outer call's wake-ups.
    """
    root = into_future(future)
    if get_config().trace:
        root = Traced(root)

    cache = _thread_cache()
    if cache.in_use:
        logger.debug(
            "Nested block_on on thread %s; creating a fresh parker",
            threading.current_thread().name,
        )
        parker, waker = parker_and_waker()
        return _drive(root, parker, waker)

    cache.in_use = True
    try:
        return _drive(root, cache.parker, cache.waker)
    finally:
        cache.in_use = False


__all__ = ["block_on", "parker_and_waker"]
