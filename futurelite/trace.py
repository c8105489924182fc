"""Poll tracing through loguru.

Wrap any future with :func:`traced` to log each poll and its outcome::

    from loguru import logger
    logger.add(sys.stderr, level="TRACE")

    block_on(traced(zip(a, b), name="pair"))

``block_on`` applies this automatically when ``FUTURELITE_TRACE`` is set.
"""

from __future__ import annotations

import threading
from collections.abc import Coroutine
from typing import Any, TypeVar

from loguru import logger as loguru_logger

from futurelite.future import Future, into_future
from futurelite.poll import Context, Poll, Ready

T = TypeVar("T")

loguru_logger = loguru_logger.bind(component="futurelite.trace")


class Traced(Future[T]):
    """Logs every poll of the wrapped future."""

    def __init__(self, future: Future[T], name: str | None = None) -> None:
        self._future = future
        self.name = name or type(future).__name__
        self.poll_count = 0

    @property
    def is_send(self) -> bool:
        return self._future.is_send

    def _poll(self, cx: Context) -> Poll[T]:
        self.poll_count += 1
        loguru_logger.trace(
            "poll #{} of {} on thread {}",
            self.poll_count,
            self.name,
            threading.current_thread().name,
        )
        result = self._future.poll(cx)
        if isinstance(result, Ready):
            loguru_logger.debug(
                "{} ready after {} poll(s): {!r}", self.name, self.poll_count, result.value
            )
        else:
            loguru_logger.trace("{} pending", self.name)
        return result

    def __repr__(self) -> str:
        return f"Traced({self.name!r}, polls={self.poll_count})"


def traced(future: Future[T] | Coroutine[Any, Any, T], name: str | None = None) -> Traced[T]:
    return Traced(into_future(future), name)


__all__ = ["Traced", "traced"]
