"""
Multi-step flows driven one event at a time.

A sequence is an ordered table of steps. The host keeps a :class:`Model`
(the cursor) inside its own state and, whenever an event of interest
arrives, builds an Update with :func:`run`. Only the step under the
cursor sees the event: if it succeeds the cursor moves forward by one and
the step's Update runs; otherwise the step's "not yet" Update runs and
the cursor stays put, so the same step gets the next event.

Example:
    >>> from stepwise import lifter as L, sequence as S, update as U
    >>> steps = [
    ...     S.on("start", [U.push(lambda s: "started")]),
    ...     S.on("next", [U.push(lambda s: "next")]),
    ... ]
    >>> U.run(S.run(L.identity(), S.resolve("start"), steps), S.init())
    (Model(offset=1), ['started'])
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from stepwise import lifter as _lifter
from stepwise import update as _update
from stepwise._vendor import Err, Ok, unwrap_optional
from stepwise.effects import ResolveEffect
from stepwise.lifter import Lifter
from stepwise.update import Update
from stepwise.utils import ensure_callable, safe_repr

logger = logging.getLogger(__name__)

S = TypeVar("S")
E = TypeVar("E")
V = TypeVar("V")

StepFn = Callable[[Any], "Sequence[Any, Any]"]


# =========================================================
# Cursor state and messages
# =========================================================
@dataclass(frozen=True)
class Model:
    """Position of the next unresolved step."""

    offset: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.offset, int) or self.offset < 0:
            raise ValueError(f"Model.offset must be a non-negative int; got {self.offset!r}")


def init() -> Model:
    return Model()


@dataclass(frozen=True)
class Msg(Generic[V]):
    """An event of interest, wrapped for :func:`run`."""

    value: V


def resolve(value: V) -> Msg[V]:
    return Msg(value)


OFFSET: Lifter[Model, int] = _lifter.attr("offset")


# =========================================================
# Outcomes
# =========================================================
class Outcome(Generic[S, E]):
    """Result of checking one step against the state: ``Succeed`` or ``Fail``."""

    __slots__ = ()

    def is_success(self) -> bool:
        return isinstance(self, Succeed)


@dataclass(frozen=True)
class Succeed(Outcome[S, E]):
    """The step is complete; advance the cursor, then run ``update``."""

    update: Update[S, E]


@dataclass(frozen=True)
class Fail(Outcome[S, E]):
    """The step is not complete; run ``update`` and keep the cursor."""

    update: Update[S, E]


@dataclass(frozen=True)
class Sequence(Generic[S, E]):
    """Deferred step decision: ``state -> Outcome``."""

    func: Callable[[S], Outcome[S, E]]

    def __post_init__(self) -> None:
        ensure_callable(self.func, "Sequence function")

    def evaluate(self, state: S) -> Outcome[S, E]:
        return evaluate(self, state)


def _ensure_sequence(value: Any, role: str) -> Sequence[Any, Any]:
    if not isinstance(value, Sequence):
        raise TypeError(f"{role} must be a Sequence; got {type(value).__name__}")
    return value


def _ensure_outcome(value: Any) -> Outcome[Any, Any]:
    if not isinstance(value, (Succeed, Fail)):
        raise TypeError(f"Sequence must produce Succeed or Fail; got {type(value).__name__}")
    return value


def evaluate(sequence: Sequence[S, E], state: S) -> Outcome[S, E]:
    return _ensure_outcome(_ensure_sequence(sequence, "evaluated value").func(state))


def succeed(update: Update[S, E]) -> Sequence[S, E]:
    outcome = Succeed(_update.batch([update]))
    return Sequence(lambda _state: outcome)


def wait_again(update: Update[S, E]) -> Sequence[S, E]:
    outcome = Fail(_update.batch([update]))
    return Sequence(lambda _state: outcome)


_WAIT: Sequence[Any, Any] = wait_again(_update.NONE)


# =========================================================
# Combinators
# =========================================================
def bind(sequence: Sequence[S, E], next_step: Callable[[], Sequence[S, E]]) -> Sequence[S, E]:
    """Try ``sequence``; only if it fails, try the one ``next_step`` builds.

    A success passes through untouched. Once the first one fails its
    Update is kept and runs ahead of whatever the second one produces.
    """

    _ensure_sequence(sequence, "bind source")
    ensure_callable(next_step, "bind continuation")

    def func(state: S) -> Outcome[S, E]:
        first = evaluate(sequence, state)
        if isinstance(first, Succeed):
            return first
        second = evaluate(next_step(), state)
        combined = _update.batch([first.update, second.update])
        if isinstance(second, Succeed):
            return Succeed(combined)
        return Fail(combined)

    return Sequence(func)


def any_of(branches: Iterable[StepFn]) -> StepFn:
    """Step that succeeds with the first branch that succeeds on the event."""

    chosen = tuple(ensure_callable(branch, "any_of branch") for branch in branches)

    def step(value: Any) -> Sequence[Any, Any]:
        folded = _WAIT
        for branch in chosen:
            folded = bind(folded, lambda branch=branch: _ensure_sequence(branch(value), "any_of branch result"))
        return folded

    return step


def with_(f: Callable[[S], Sequence[S, E]]) -> Sequence[S, E]:
    """Choose the sequence from the live state at evaluation time."""

    ensure_callable(f, "with_ function")
    return Sequence(lambda state: evaluate(f(state), state))


def when(condition: bool, sequence: Sequence[S, E]) -> Sequence[S, E]:
    _ensure_sequence(sequence, "when target")
    return sequence if condition else _WAIT


def unless(condition: bool, sequence: Sequence[S, E]) -> Sequence[S, E]:
    _ensure_sequence(sequence, "unless target")
    return _WAIT if condition else sequence


# =========================================================
# Step constructors
# =========================================================
def on(expected: Any, updates: Iterable[Update[S, E]]) -> StepFn:
    """Step completed by an event equal to ``expected``."""

    done = succeed(_update.batch(updates))

    def step(value: Any) -> Sequence[S, E]:
        return done if value == expected else _WAIT

    return step


def on_any_of(expected: Iterable[Any], updates: Iterable[Update[S, E]]) -> StepFn:
    accepted = tuple(expected)
    done = succeed(_update.batch(updates))

    def step(value: Any) -> Sequence[S, E]:
        return done if value in accepted else _WAIT

    return step


def on_nothing(updates: Iterable[Update[S, E]]) -> StepFn:
    done = succeed(_update.batch(updates))

    def step(value: Any) -> Sequence[S, E]:
        present, _ = unwrap_optional(value)
        return _WAIT if present else done

    return step


def _payload_step(
    branches: Iterable[Callable[[Any], Update[S, E]]],
    role: str,
    extract: Callable[[Any], tuple[bool, Any]],
) -> StepFn:
    chosen = tuple(ensure_callable(branch, role) for branch in branches)

    def step(value: Any) -> Sequence[S, E]:
        matched, payload = extract(value)
        if not matched:
            return _WAIT
        return succeed(_update.batch([branch(payload) for branch in chosen]))

    return step


def on_just(branches: Iterable[Callable[[Any], Update[S, E]]]) -> StepFn:
    """Step completed by a present optional; branches receive the payload."""

    return _payload_step(branches, "on_just branch", unwrap_optional)


def on_ok(branches: Iterable[Callable[[Any], Update[S, E]]]) -> StepFn:
    def extract(value: Any) -> tuple[bool, Any]:
        if isinstance(value, Ok):
            return True, value.value
        return False, None

    return _payload_step(branches, "on_ok branch", extract)


def on_err(branches: Iterable[Callable[[Any], Update[S, E]]]) -> StepFn:
    def extract(value: Any) -> tuple[bool, Any]:
        if isinstance(value, Err):
            return True, value.error
        return False, None

    return _payload_step(branches, "on_err branch", extract)


# =========================================================
# Driving the cursor
# =========================================================
def call(value: Any, wrap: Callable[[Msg[Any]], Any] | None = None) -> Update[Any, ResolveEffect]:
    """Emit a :class:`ResolveEffect` that feeds ``resolve(value)`` back in.

    ``wrap`` turns the message into the host's own event type.
    """

    msg = resolve(value)
    event = ensure_callable(wrap, "call wrapper")(msg) if wrap is not None else msg
    effect = ResolveEffect(event)
    return _update.push(lambda _state: effect)


def run(
    lifter: Lifter[S, Model],
    msg: Msg[Any],
    steps: Iterable[StepFn],
) -> Update[S, Any]:
    """Resolve ``msg`` against the step under the cursor.

    Events that do not complete the current step, or that arrive once
    every step is done, are absorbed without touching the cursor.
    """

    if not isinstance(lifter, Lifter):
        raise TypeError(f"sequence lifter must be a Lifter; got {type(lifter).__name__}")
    if not isinstance(msg, Msg):
        raise TypeError(f"sequence message must be a Msg; got {type(msg).__name__}")
    table = tuple(ensure_callable(step, "sequence step") for step in steps)
    advance = _lifter.run(_lifter.compose(lifter, OFFSET), _update.modify(lambda offset: offset + 1))

    def resolve_current(state: S) -> Update[S, Any]:
        offset = lifter.get(state).offset
        if offset >= len(table):
            logger.debug(f"sequence exhausted at step {offset}; absorbed {safe_repr(msg.value)}")
            return _update.NONE
        outcome = evaluate(_ensure_sequence(table[offset](msg.value), "sequence step result"), state)
        if isinstance(outcome, Succeed):
            logger.debug(
                f"sequence step {offset} resolved by {safe_repr(msg.value)}; "
                f"offset {offset} -> {offset + 1}"
            )
            return _update.batch([advance, outcome.update])
        logger.debug(f"sequence step {offset} still waiting after {safe_repr(msg.value)}")
        return outcome.update

    return _update.defer(resolve_current)


__all__ = [
    "OFFSET",
    "Fail",
    "Model",
    "Msg",
    "Outcome",
    "Sequence",
    "StepFn",
    "Succeed",
    "any_of",
    "bind",
    "call",
    "evaluate",
    "init",
    "on",
    "on_any_of",
    "on_err",
    "on_just",
    "on_nothing",
    "on_ok",
    "resolve",
    "run",
    "succeed",
    "unless",
    "wait_again",
    "when",
    "with_",
]
