"""
Lifters: accessor pairs that focus an Update on part of a larger state.

A Lifter must round-trip: ``set(get(o), o) == o`` and
``get(set(i, o)) == i``. Composition preserves both laws when its inputs
obey them. :func:`stepwise.testing.check_lens_laws` checks a Lifter
against concrete values.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from frozendict import frozendict

from stepwise import update as _update
from stepwise.update import Update
from stepwise.utils import ensure_callable

O = TypeVar("O")
M = TypeVar("M")
I = TypeVar("I")  # noqa: E741
E = TypeVar("E")


@dataclass(frozen=True)
class Lifter(Generic[O, I]):
    """Read an inner value out of an outer one, and write it back."""

    get: Callable[[O], I]
    set: Callable[[I, O], O]

    def __post_init__(self) -> None:
        ensure_callable(self.get, "Lifter.get")
        ensure_callable(self.set, "Lifter.set")

    def compose(self, inner: Lifter[I, Any]) -> Lifter[O, Any]:
        return compose(self, inner)

    def __rshift__(self, inner: object) -> Lifter[O, Any]:
        if not isinstance(inner, Lifter):
            return NotImplemented
        return compose(self, inner)

    def run(self, update: Update[I, E]) -> Update[O, E]:
        return run(self, update)


def compose(outer_to_mid: Lifter[O, M], mid_to_inner: Lifter[M, I]) -> Lifter[O, I]:
    """Chain two lifters into one that reaches from outer straight to inner.

    Writing goes through the middle value: the current mid value is read
    from the outer state, the inner value written into it, and the new mid
    value written back.
    """

    def get(outer: O) -> I:
        return mid_to_inner.get(outer_to_mid.get(outer))

    def set_(inner: I, outer: O) -> O:
        mid = outer_to_mid.get(outer)
        return outer_to_mid.set(mid_to_inner.set(inner, mid), outer)

    return Lifter(get, set_)


def run(lifter: Lifter[O, I], update: Update[I, E]) -> Update[O, E]:
    """Evaluate ``update`` on the focused part of the state."""

    return _update.child(lifter.get, lifter.set, update)


def identity() -> Lifter[Any, Any]:
    return Lifter(lambda outer: outer, lambda inner, _outer: inner)


def attr(name: str) -> Lifter[Any, Any]:
    """Focus a dataclass field; writing goes through ``dataclasses.replace``."""

    if not isinstance(name, str):
        raise TypeError(f"attr name must be a str; got {type(name).__name__}")

    def get(outer: Any) -> Any:
        return getattr(outer, name)

    def set_(inner: Any, outer: Any) -> Any:
        return dataclasses.replace(outer, **{name: inner})

    return Lifter(get, set_)


def key(name: Any) -> Lifter[Mapping[Any, Any], Any]:
    """Focus one entry of a mapping.

    ``frozendict`` states stay ``frozendict``; any other mapping is copied
    into a new ``dict``.
    """

    def get(outer: Mapping[Any, Any]) -> Any:
        return outer[name]

    def set_(inner: Any, outer: Mapping[Any, Any]) -> Mapping[Any, Any]:
        if isinstance(outer, frozendict):
            return outer.set(name, inner)
        return {**outer, name: inner}

    return Lifter(get, set_)


__all__ = ["Lifter", "attr", "compose", "identity", "key", "run"]
