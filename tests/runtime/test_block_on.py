"""Tests for the blocking driver."""

from __future__ import annotations

import threading
import time

import pytest

from futurelite import (
    PENDING,
    Ready,
    block_on,
    poll_state,
    race,
    ready,
    waker,
    yield_now,
    zip,
)
from futurelite.driver import _thread_cache


def completed_by_thread(value, delay: float = 0.02):
    """Future completed by a background thread that wakes the task afterwards."""

    def poll(state, cx):
        if state["done"].is_set():
            return Ready(value)
        if state["thread"] is None:
            waker_handle = cx.waker.clone()

            def finish() -> None:
                time.sleep(delay)
                state["done"].set()
                waker_handle.wake()

            state["thread"] = threading.Thread(target=finish, daemon=True)
            state["thread"].start()
        return PENDING

    return poll_state({"done": threading.Event(), "thread": None}, poll)


def run_with_deadline(fn, timeout: float = 5.0):
    """Run ``fn`` in a worker thread and fail instead of hanging on deadlock."""

    outcome: dict = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=target, daemon=True)
    worker.start()
    worker.join(timeout)
    assert not worker.is_alive(), "block_on deadlocked"
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


class TestBlockOn:
    def test_ready_future(self):
        assert block_on(ready(3)) == 3

    def test_coroutine(self):
        async def add() -> int:
            return 1 + 2

        assert block_on(add()) == 3

    def test_self_waking_future(self):
        async def spin() -> int:
            for _ in range(10):
                await yield_now()
            return 10

        assert block_on(spin()) == 10

    def test_wake_from_another_thread(self):
        assert run_with_deadline(lambda: block_on(completed_by_thread("remote"))) == "remote"

    def test_combinators_with_remote_wakes(self):
        fut = zip(completed_by_thread(1, 0.01), completed_by_thread(2, 0.03))
        assert run_with_deadline(lambda: block_on(fut)) == (1, 2)

    def test_race_with_remote_wakes(self):
        fut = race(completed_by_thread("slow", 0.5), completed_by_thread("fast", 0.01))
        assert run_with_deadline(lambda: block_on(fut)) == "fast"

    def test_exceptions_propagate_and_release_the_cache(self):
        async def explode() -> None:
            await yield_now()
            raise LookupError("missing")

        with pytest.raises(LookupError, match="missing"):
            block_on(explode())

        assert not _thread_cache().in_use
        assert block_on(ready("still works")) == "still works"

    def test_rejects_non_futures(self):
        with pytest.raises(TypeError):
            block_on(42)  # type: ignore[arg-type]


class TestWakerCache:
    def test_cached_waker_is_reused_across_calls(self):
        first = block_on(waker())
        second = block_on(waker())
        assert first.will_wake(second)
        assert first.will_wake(_thread_cache().waker)

    def test_each_thread_has_its_own_cache(self):
        main_waker = block_on(waker())
        other = run_with_deadline(lambda: block_on(waker()))
        assert not main_waker.will_wake(other)

    def test_cache_is_free_between_calls(self):
        block_on(ready(None))
        assert not _thread_cache().in_use

    def test_wake_after_completion_is_harmless(self):
        stale = block_on(waker())
        for _ in range(3):
            stale.wake()

        assert block_on(ready("next")) == "next"

        remote = threading.Thread(target=stale.wake)
        remote.start()
        remote.join()
        assert block_on(ready("again")) == "again"


class TestNestedBlockOn:
    def test_inner_run_inside_outer_poll(self):
        async def inner() -> str:
            await yield_now()
            return "inner"

        async def outer() -> tuple[str, str]:
            await yield_now()
            nested = block_on(inner())
            await yield_now()
            return nested, "outer"

        assert run_with_deadline(lambda: block_on(outer())) == ("inner", "outer")

    def test_nested_run_gets_a_fresh_waker(self):
        async def outer():
            outer_waker = await waker()
            inner_waker = block_on(waker())
            return outer_waker, inner_waker

        outer_waker, inner_waker = run_with_deadline(lambda: block_on(outer()))

        assert not outer_waker.will_wake(inner_waker)

    def test_nested_run_marks_nothing_free_early(self):
        seen = {}

        async def outer() -> None:
            block_on(ready(None))
            seen["in_use_after_inner"] = _thread_cache().in_use

        block_on(outer())

        assert seen["in_use_after_inner"] is True
        assert _thread_cache().in_use is False

    def test_deeply_nested(self):
        def nest(depth: int):
            async def level() -> int:
                await yield_now()
                if depth == 0:
                    return 0
                return block_on(nest(depth - 1)) + 1

            return level()

        assert run_with_deadline(lambda: block_on(nest(5))) == 5
