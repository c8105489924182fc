"""
futurelite - Poll-based future combinators and a blocking driver.

A small toolkit of suspendable computations: futures are state machines
advanced by ``poll``, composed with combinators, and run to completion on the
calling thread by ``block_on``.

Example:
    >>> from futurelite import block_on, pending, race, ready, yield_now, zip
    >>>
    >>> async def main():
    ...     await yield_now()
    ...     a, b = await zip(ready(1), ready(2))
    ...     return a + b + await race(ready(3), pending())
    >>>
    >>> block_on(main())
    6
"""

# Poll protocol
from futurelite.poll import (
    PENDING,
    Context,
    Pending,
    Poll,
    Ready,
    Waker,
    waker_fn,
)

# Outcome types
from futurelite.outcome import (
    NOTHING,
    Err,
    Maybe,
    Nothing,
    Ok,
    Result,
    Some,
)

from futurelite.future import CoroutineFuture, Future, into_future

from futurelite.combinators import (
    Or,
    PendingFuture,
    PollFn,
    PollOnce,
    PollState,
    Race,
    ReadyFuture,
    Sleep,
    TryZip,
    YieldNow,
    Zip,
    or_,
    pending,
    poll_fn,
    poll_once,
    poll_state,
    race,
    ready,
    sleep,
    try_zip,
    waker,
    yield_now,
    zip,
)

from futurelite.boxed import Boxed, BoxedLocal, boxed, boxed_local
from futurelite.driver import block_on
from futurelite.parking import Parker, Unparker
from futurelite.trace import Traced, traced

from futurelite.config import Config, get_config, reload_config

from futurelite.errors import (
    ForeignAwaitableError,
    FutureliteError,
    NotSendError,
    PolledAfterCompletionError,
    WrongThreadError,
)

__version__ = "0.1.0"

__all__ = [
    # Poll protocol
    "PENDING",
    "Context",
    "Pending",
    "Poll",
    "Ready",
    "Waker",
    "waker_fn",
    # Outcome types
    "NOTHING",
    "Err",
    "Maybe",
    "Nothing",
    "Ok",
    "Result",
    "Some",
    # Futures
    "CoroutineFuture",
    "Future",
    "into_future",
    # Combinators
    "Or",
    "PendingFuture",
    "PollFn",
    "PollOnce",
    "PollState",
    "Race",
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
    # Handles
    "Boxed",
    "BoxedLocal",
    "boxed",
    "boxed_local",
    # Driver
    "Parker",
    "Unparker",
    "block_on",
    # Tracing
    "Traced",
    "traced",
    # Config
    "Config",
    "get_config",
    "reload_config",
    # Errors
    "ForeignAwaitableError",
    "FutureliteError",
    "NotSendError",
    "PolledAfterCompletionError",
    "WrongThreadError",
]
