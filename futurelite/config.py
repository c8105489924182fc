"""Environment switches.

``FUTURELITE_TRACE``
    ``1``/``true``/``yes`` wraps every future driven by ``block_on`` in a
    loguru poll tracer (see :mod:`futurelite.trace`).
``FUTURELITE_RACE_SEED``
    Integer seed for the generator ``race`` uses when no ``rng`` is given.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

TRACE_ENV = "FUTURELITE_TRACE"
RACE_SEED_ENV = "FUTURELITE_RACE_SEED"

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class Config:
    trace: bool = False
    race_seed: int | None = None


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Build a ``Config`` from ``environ`` (defaults to ``os.environ``)."""

    env = os.environ if environ is None else environ
    trace = env.get(TRACE_ENV, "").strip().lower() in _TRUTHY

    raw_seed = env.get(RACE_SEED_ENV, "").strip()
    race_seed: int | None = None
    if raw_seed:
        try:
            race_seed = int(raw_seed)
        except ValueError as exc:
            raise ValueError(
                f"{RACE_SEED_ENV} must be an integer, got {raw_seed!r}"
            ) from exc

    return Config(trace=trace, race_seed=race_seed)


_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide config, reading the environment on first use."""

    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Re-read the environment and replace the cached config."""

    global _config
    _config = load_config()
    return _config


__all__ = [
    "RACE_SEED_ENV",
    "TRACE_ENV",
    "Config",
    "get_config",
    "load_config",
    "reload_config",
]
