"""Outcome types carried through combinators.

``try_zip`` children resolve to ``Ok(value)`` or ``Err(error)``; ``poll_once``
resolves to ``Some(value)`` or ``NOTHING``, which is also how ``zip`` marks an
empty slot.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Base of ``Ok`` and ``Err``."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T_co:
        """The success value; an ``Err`` re-raises its error."""

        if isinstance(self, Ok):
            return self.value
        raise self.error


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    error: Exception


class Maybe(Generic[T_co]):
    """Base of ``Some`` and the ``NOTHING`` singleton."""

    __slots__ = ()

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return isinstance(self, Nothing)

    def unwrap(self) -> T_co:
        if isinstance(self, Some):
            return self.value
        raise RuntimeError("unwrap() on NOTHING")


@dataclass(frozen=True)
class Some(Maybe[T], Generic[T]):
    value: T


class Nothing(Maybe[NoReturn]):
    __slots__ = ()
    _instance: Nothing | None = None

    def __new__(cls) -> Nothing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOTHING"


NOTHING: Final[Maybe[NoReturn]] = Nothing()

__all__ = [
    "NOTHING",
    "Err",
    "Maybe",
    "Nothing",
    "Ok",
    "Result",
    "Some",
]
