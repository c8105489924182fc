"""Tests for the Boxed and BoxedLocal handles."""

from __future__ import annotations

import threading

import pytest

from futurelite import (
    PENDING,
    Boxed,
    BoxedLocal,
    CoroutineFuture,
    NotSendError,
    WrongThreadError,
    block_on,
    boxed,
    boxed_local,
    pending,
    poll_fn,
    race,
    ready,
    zip,
)


def run_in_thread(fn):
    outcome: dict = {}

    def target() -> None:
        try:
            outcome["value"] = fn()
        except BaseException as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=target, daemon=True)
    worker.start()
    worker.join(5.0)
    assert not worker.is_alive()
    return outcome


class TestBoxed:
    def test_erases_different_futures_to_one_type(self):
        futures = [ready("a").boxed(), pending().boxed(), zip(ready(1), ready(2)).boxed()]
        assert all(isinstance(f, Boxed) for f in futures)
        assert block_on(futures[0]) == "a"
        assert block_on(futures[2]) == (1, 2)

    def test_can_be_driven_from_another_thread(self):
        handle = boxed(zip(ready(1), ready(2)))
        outcome = run_in_thread(lambda: block_on(handle))
        assert outcome == {"value": (1, 2)}

    def test_accepts_coroutines(self):
        async def three() -> int:
            return 3

        assert block_on(boxed(three())) == 3

    def test_rejects_local_futures(self):
        with pytest.raises(NotSendError):
            boxed_local(ready(1)).boxed()

    def test_rejects_trees_containing_local_futures(self):
        with pytest.raises(NotSendError, match="cannot be moved across threads"):
            Boxed(race(ready(1), boxed_local(pending())))

    def test_rejects_futures_declared_local(self):
        async def noop() -> None:
            return None

        with pytest.raises(NotSendError):
            Boxed(poll_fn(lambda cx: PENDING, send=False))
        local_coro = CoroutineFuture(noop(), send=False)
        with pytest.raises(NotSendError):
            local_coro.boxed()
        block_on(local_coro)

    def test_is_send(self):
        assert boxed(ready(1)).is_send


class TestBoxedLocal:
    def test_runs_on_its_owner_thread(self):
        handle = ready("local").boxed_local()
        assert isinstance(handle, BoxedLocal)
        assert not handle.is_send
        assert block_on(handle) == "local"
        assert handle.owner == threading.get_ident()

    def test_polling_from_a_foreign_thread_fails(self, counting_waker):
        handle = boxed_local(pending())
        assert handle.poll(counting_waker.cx) is PENDING

        outcome = run_in_thread(lambda: handle.poll(counting_waker.cx))

        error = outcome["error"]
        assert isinstance(error, WrongThreadError)
        assert error.owner == threading.get_ident()
        assert error.current != error.owner

    def test_first_poller_becomes_the_owner(self):
        handle = boxed_local(ready(5))
        outcome = run_in_thread(lambda: block_on(handle))
        assert outcome == {"value": 5}
        assert handle.owner != threading.get_ident()
