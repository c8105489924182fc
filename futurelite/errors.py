from __future__ import annotations

from typing import Any


class FutureliteError(Exception):
    """Base class for misuse errors raised by futurelite."""


class PolledAfterCompletionError(FutureliteError, RuntimeError):
    """Raised when a future is polled again after it returned ``Ready``."""

    def __init__(self, future: Any) -> None:
        self.future = future
        super().__init__(
            f"{type(future).__name__} was polled after completion\n"
            "Hint: track completion yourself and drop the future once it is Ready"
        )


class NotSendError(FutureliteError, TypeError):
    """Raised when a thread-bound future is put behind a thread-transferable handle."""

    def __init__(self, future: Any) -> None:
        self.future = future
        super().__init__(
            f"{type(future).__name__} cannot be moved across threads\n"
            "Hint: use boxed_local() for futures that stay on one thread"
        )


class WrongThreadError(FutureliteError, RuntimeError):
    """Raised when a ``BoxedLocal`` is polled from a thread other than its owner."""

    def __init__(self, owner: int, current: int) -> None:
        self.owner = owner
        self.current = current
        super().__init__(
            f"BoxedLocal owned by thread {owner} was polled from thread {current}"
        )


class ForeignAwaitableError(FutureliteError, TypeError):
    """Raised when a driven coroutine awaits something that is not a futurelite Future."""

    def __init__(self, signal: Any) -> None:
        self.signal = signal
        super().__init__(
            f"Coroutine yielded {signal!r}, which futurelite cannot drive\n"
            "Hint: only futurelite futures may be awaited inside block_on(); "
            "asyncio objects need an asyncio event loop"
        )


__all__ = [
    "ForeignAwaitableError",
    "FutureliteError",
    "NotSendError",
    "PolledAfterCompletionError",
    "WrongThreadError",
]
