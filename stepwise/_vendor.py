"""
Sum types read by the case-dispatch combinators.

The combinators only tell the cases apart and take the payload out, so
these types carry no behaviour of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Either ``Ok(value)`` or ``Err(error)``."""

    __slots__ = ()


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    """Failed result; ``error`` may be an exception or a plain message."""

    error: Any


class Maybe(Generic[T_co]):
    """Either ``Some(value)`` or ``NOTHING``."""

    __slots__ = ()


@dataclass(frozen=True)
class Some(Maybe[T], Generic[T]):
    value: T


class Nothing(Maybe[NoReturn]):
    """Singleton for an absent value."""

    __slots__ = ()
    _instance: Nothing | None = None

    def __new__(cls) -> Nothing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Nothing()"


NOTHING: Final[Maybe[NoReturn]] = Nothing()


def unwrap_optional(value: Any) -> tuple[bool, Any]:
    """Split a ``Maybe`` or plain optional into ``(present, payload)``.

    ``None`` and ``NOTHING`` are absent; every other value, falsy ones
    included, is present.
    """

    if isinstance(value, Some):
        return True, value.value
    if value is None or isinstance(value, Nothing):
        return False, None
    return True, value


__all__ = [
    "NOTHING",
    "Err",
    "Maybe",
    "Nothing",
    "Ok",
    "Result",
    "Some",
    "unwrap_optional",
]
