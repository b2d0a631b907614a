"""
Update values for the stepwise system.

An ``Update`` describes a state transition: given the current state it
produces the next state together with an ordered list of effect
descriptors. Updates are plain immutable values; nothing happens until
:func:`run` evaluates one against a state.

Example:
    >>> from stepwise import update as U
    >>> bump = U.modify(lambda n: n + 1)
    >>> say = U.push(lambda n: f"now {n}")
    >>> U.run(U.batch([bump, say, bump, say]), 0)
    (2, ['now 1', 'now 2'])
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from stepwise._vendor import Err, Ok, unwrap_optional
from stepwise.utils import DEBUG_UPDATES, ensure_callable

logger = logging.getLogger(__name__)

S = TypeVar("S")
E = TypeVar("E")
F = TypeVar("F")
A = TypeVar("A")
O = TypeVar("O")

# A single primitive transition: state -> (state, emitted effects)
Step = Callable[[Any], tuple[Any, tuple[Any, ...]]]


@dataclass(frozen=True)
class Update(Generic[S, E]):
    """Ordered chain of primitive transition steps.

    Batching concatenates step chains, so an arbitrarily long sequence of
    ``then`` calls is still evaluated by a single loop.
    """

    steps: tuple[Step, ...] = ()

    def then(self, other: Update[S, E]) -> Update[S, E]:
        """Run ``other`` after this update, seeing the state it produced."""

        return batch([self, other])

    def __add__(self, other: object) -> Update[S, E]:
        if not isinstance(other, Update):
            return NotImplemented
        return self.then(other)

    def map(self, f: Callable[[E], F]) -> Update[S, F]:
        """Relabel every effect emitted by this update through ``f``."""

        return _map_effects(f, self)

    def run(self, state: S) -> tuple[S, list[E]]:
        return run(self, state)


NONE: Update[Any, Any] = Update()


def _evaluate(update: Update[S, E], state: S) -> tuple[S, tuple[E, ...]]:
    effects: list[E] = []
    for step in update.steps:
        state, emitted = step(state)
        effects.extend(emitted)
    return state, tuple(effects)


def _ensure_update(value: Any, role: str) -> Update[Any, Any]:
    if not isinstance(value, Update):
        raise TypeError(f"{role} must be an Update; got {type(value).__name__}")
    return value


def _collect(updates: Iterable[Update[S, E]], role: str = "batch item") -> tuple[Update[S, E], ...]:
    if isinstance(updates, Update):
        raise TypeError(f"{role}s must be given as a list of Updates, not a single Update")
    return tuple(_ensure_update(item, role) for item in updates)


def _branches(branches: Iterable[Callable[[A], Update[S, E]]], role: str) -> tuple[Callable[[A], Update[S, E]], ...]:
    return tuple(ensure_callable(branch, role) for branch in branches)


def _apply_branches(
    branches: tuple[Callable[[A], Update[S, E]], ...],
    payload: A,
    role: str,
) -> Update[S, E]:
    return batch([_ensure_update(branch(payload), role) for branch in branches])


# =========================================================
# Primitives
# =========================================================
def none() -> Update[Any, Any]:
    """Identity transition with no effects."""

    return NONE


def modify(f: Callable[[S], S]) -> Update[S, Any]:
    """Replace the state with ``f(state)``; emit nothing."""

    ensure_callable(f, "modify function")

    def step(state: S) -> tuple[S, tuple[Any, ...]]:
        return f(state), ()

    return Update((step,))


def push(f: Callable[[S], E]) -> Update[S, E]:
    """Emit the single effect ``f(state)``; leave the state unchanged."""

    ensure_callable(f, "push function")

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        return state, (f(state),)

    return Update((step,))


def push_all(f: Callable[[S], Iterable[E]]) -> Update[S, E]:
    """Emit every effect yielded by ``f(state)`` (possibly none), in order."""

    ensure_callable(f, "push_all function")

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        return state, tuple(f(state))

    return Update((step,))


def init(f: Callable[[S], tuple[S, Iterable[E]]]) -> Update[S, E]:
    """Apply ``f`` once; take both the new state and the effects from it.

    Both halves come from the same call against the state ``init`` sees,
    so the effects are not recomputed from the modified state.
    """

    ensure_callable(f, "init function")

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        new_state, effects = f(state)
        return new_state, tuple(effects)

    return Update((step,))


def defer(f: Callable[[S], Update[S, E]]) -> Update[S, E]:
    """Build the update from the state it is evaluated against."""

    ensure_callable(f, "defer function")

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        return _evaluate(_ensure_update(f(state), "defer result"), state)

    return Update((step,))


# =========================================================
# Sequencing
# =========================================================
def batch(updates: Iterable[Update[S, E]]) -> Update[S, E]:
    """Run ``updates`` left to right, threading the state through.

    Effects are concatenated in execution order.
    """

    collected = _collect(updates)
    if len(collected) == 1:
        return collected[0]
    return Update(tuple(step for item in collected for step in item.steps))


def when(condition: bool, updates: Iterable[Update[S, E]]) -> Update[S, E]:
    block = batch(updates)
    return block if condition else NONE


def unless(condition: bool, updates: Iterable[Update[S, E]]) -> Update[S, E]:
    block = batch(updates)
    return NONE if condition else block


def with_(
    selector: Callable[[S], A],
    branches: Iterable[Callable[[A], Update[S, E]]],
) -> Update[S, E]:
    """Feed ``selector(state)`` to each branch, re-reading it after every branch.

    Later branches see whatever earlier branches did to the state.
    """

    ensure_callable(selector, "with_ selector")
    chosen = _branches(branches, "with_ branch")

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        effects: list[E] = []
        for branch in chosen:
            update = _ensure_update(branch(selector(state)), "with_ branch result")
            state, emitted = _evaluate(update, state)
            effects.extend(emitted)
        return state, tuple(effects)

    return Update((step,))


# =========================================================
# Case dispatch
# =========================================================
def on(predicate: Callable[[S], bool], updates: Iterable[Update[S, E]]) -> Update[S, E]:
    """Run ``updates`` only if ``predicate`` holds for the state at that point."""

    ensure_callable(predicate, "on predicate")
    block = batch(updates)

    def step(state: S) -> tuple[S, tuple[E, ...]]:
        if predicate(state):
            return _evaluate(block, state)
        return state, ()

    return Update((step,))


def on_nothing(value: Any, updates: Iterable[Update[S, E]]) -> Update[S, E]:
    """Run ``updates`` when ``value`` is ``None``/``Nothing``."""

    present, _ = unwrap_optional(value)
    block = batch(updates)
    return NONE if present else block


def on_just(value: Any, branches: Iterable[Callable[[A], Update[S, E]]]) -> Update[S, E]:
    """Apply each branch to the payload of a present optional and batch them."""

    chosen = _branches(branches, "on_just branch")
    present, payload = unwrap_optional(value)
    if not present:
        return NONE
    return _apply_branches(chosen, payload, "on_just branch result")


def on_ok(result: Any, branches: Iterable[Callable[[A], Update[S, E]]]) -> Update[S, E]:
    chosen = _branches(branches, "on_ok branch")
    if not isinstance(result, Ok):
        return NONE
    return _apply_branches(chosen, result.value, "on_ok branch result")


def on_err(result: Any, branches: Iterable[Callable[[Any], Update[S, E]]]) -> Update[S, E]:
    chosen = _branches(branches, "on_err branch")
    if not isinstance(result, Err):
        return NONE
    return _apply_branches(chosen, result.error, "on_err branch result")


# =========================================================
# Lifting
# =========================================================
def _map_effects(f: Callable[[E], F], update: Update[S, E]) -> Update[S, F]:
    ensure_callable(f, "effect mapper")
    inner = _ensure_update(update, "mapped update")

    def step(state: S) -> tuple[S, tuple[F, ...]]:
        new_state, effects = _evaluate(inner, state)
        return new_state, tuple(f(effect) for effect in effects)

    return Update((step,))


map = _map_effects  # noqa: A001


def child(
    get: Callable[[O], S],
    put: Callable[[S, O], O],
    update: Update[S, E],
) -> Update[O, E]:
    """Run ``update`` on ``get(outer)`` and write the result back with ``put``."""

    ensure_callable(get, "child getter")
    ensure_callable(put, "child setter")
    inner = _ensure_update(update, "child update")

    def step(outer: O) -> tuple[O, tuple[E, ...]]:
        new_inner, effects = _evaluate(inner, get(outer))
        return put(new_inner, outer), effects

    return Update((step,))


def maybe_child(
    get: Callable[[O], Any],
    put: Callable[[S, O], O],
    update: Update[S, E],
) -> Update[O, E]:
    """Like :func:`child`, but skip entirely when ``get`` finds nothing."""

    ensure_callable(get, "maybe_child getter")
    ensure_callable(put, "maybe_child setter")
    inner = _ensure_update(update, "maybe_child update")

    def step(outer: O) -> tuple[O, tuple[E, ...]]:
        present, current = unwrap_optional(get(outer))
        if not present:
            return outer, ()
        new_inner, effects = _evaluate(inner, current)
        return put(new_inner, outer), effects

    return Update((step,))


# =========================================================
# Evaluation
# =========================================================
def run(update: Update[S, E], state: S) -> tuple[S, list[E]]:
    """Evaluate ``update`` against ``state``; return ``(new_state, effects)``."""

    _ensure_update(update, "run target")
    new_state, effects = _evaluate(update, state)
    if DEBUG_UPDATES:
        logger.debug(f"update: {len(update.steps)} steps emitted {len(effects)} effects")
    return new_state, list(effects)


__all__ = [
    "NONE",
    "Step",
    "Update",
    "batch",
    "child",
    "defer",
    "init",
    "map",
    "maybe_child",
    "modify",
    "none",
    "on",
    "on_err",
    "on_just",
    "on_nothing",
    "on_ok",
    "push",
    "push_all",
    "run",
    "unless",
    "when",
    "with_",
]
