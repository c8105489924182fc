"""
Shared fixtures for futurelite tests.

Provides a counting waker, scripted futures with a controllable number of
pending polls, and a fixed bit source for race ordering. Config and the
module-wide race generator are reset around every test.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from typing import Any

import pytest

import futurelite.combinators as combinators
import futurelite.config as config
from futurelite import PENDING, Context, Future, Ready, waker_fn
from futurelite.config import RACE_SEED_ENV, TRACE_ENV
from futurelite.poll import Poll


class CountingWaker:
    """Waker whose wakes are counted; safe to wake from many threads."""

    def __init__(self) -> None:
        self.count = 0
        self._lock = threading.Lock()
        self.waker = waker_fn(self._wake)

    def _wake(self) -> None:
        with self._lock:
            self.count += 1

    @property
    def cx(self) -> Context:
        return Context(self.waker)


class ScriptedFuture(Future[Any]):
    """Pending for ``pending_polls`` polls, then ``Ready(value)``.

    Each pending poll wakes the context unless ``wake`` is false. Polls are
    counted, and recorded under ``name`` in ``log`` when one is given.
    """

    def __init__(
        self,
        value: Any,
        pending_polls: int = 0,
        *,
        wake: bool = True,
        name: str | None = None,
        log: list[str] | None = None,
    ) -> None:
        self.value = value
        self.remaining = pending_polls
        self.polls = 0
        self.wake = wake
        self.name = name
        self.log = log

    def _poll(self, cx: Context) -> Poll[Any]:
        self.polls += 1
        if self.log is not None and self.name is not None:
            self.log.append(self.name)
        if self.remaining > 0:
            self.remaining -= 1
            if self.wake:
                cx.waker.wake_by_ref()
            return PENDING
        return Ready(self.value)


class FixedBits:
    """``getrandbits`` stand-in replaying a fixed sequence of bits."""

    def __init__(self, bits: Iterable[int]) -> None:
        self._bits = list(bits)
        self.calls = 0

    def getrandbits(self, k: int, /) -> int:
        assert k == 1
        bit = self._bits[self.calls % len(self._bits)]
        self.calls += 1
        return bit


@pytest.fixture
def counting_waker() -> CountingWaker:
    return CountingWaker()


@pytest.fixture
def scripted() -> type[ScriptedFuture]:
    return ScriptedFuture


@pytest.fixture
def fixed_bits() -> type[FixedBits]:
    return FixedBits


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Run every test against an unset environment and a fresh race generator."""

    monkeypatch.delenv(TRACE_ENV, raising=False)
    monkeypatch.delenv(RACE_SEED_ENV, raising=False)
    monkeypatch.setattr(config, "_config", None)
    monkeypatch.setattr(combinators, "_default_rng_cache", None)
    yield
