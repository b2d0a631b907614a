"""
Tests for the reference host loop and its configuration.
"""

from dataclasses import dataclass, replace

import pytest

from stepwise import DispatchLimitError, Host, ResolveEffect
from stepwise import lifter as L
from stepwise import sequence as S
from stepwise import update as U
from stepwise.config import DEFAULT_CONFIG, make_config


@dataclass(frozen=True)
class Fetch:
    url: str


@dataclass(frozen=True)
class Loaded:
    body: str


@dataclass(frozen=True)
class Flow:
    steps: S.Model = S.Model()
    log: tuple = ()


STEPS = L.attr("steps")


def note(text: str) -> U.Update:
    return U.modify(lambda f: replace(f, log=f.log + (text,)))


FLOW = [
    S.on("begin", [note("begun"), S.call("auto")]),
    S.on("auto", [note("auto-advanced"), U.push(lambda f: Fetch("/data"))]),
    S.on_just([lambda body: note(f"loaded {body}")]),
]


def update_for(event) -> U.Update:
    if isinstance(event, S.Msg):
        return S.run(STEPS, event, FLOW)
    if isinstance(event, Loaded):
        return S.run(STEPS, S.resolve(event.body), FLOW)
    return U.none()


def test_resolve_effect_is_processed_after_current_evaluation() -> None:
    host = Host(Flow(), update_for)
    host.dispatch(S.resolve("begin"))
    assert host.state.steps.offset == 2
    assert host.state.log == ("begun", "auto-advanced")
    assert host.history == [S.resolve("begin"), S.resolve("auto")]
    assert host.effects == [ResolveEffect(S.resolve("auto")), Fetch("/data")]


def test_handler_follow_up_events_are_dispatched() -> None:
    fetched = []

    def fetch(effect: Fetch):
        fetched.append(effect.url)
        return Loaded("hello")

    host = Host(Flow(), update_for, handlers={Fetch: fetch})
    host.dispatch(S.resolve("begin"))
    assert fetched == ["/data"]
    assert host.state.steps.offset == 3
    assert host.state.log[-1] == "loaded hello"


def test_dispatch_from_handler_only_queues() -> None:
    host: Host

    def reentrant(effect: Fetch):
        state_before = host.state
        host.dispatch(Loaded("queued"))
        assert host.state is state_before
        return None

    host = Host(Flow(), update_for, handlers={Fetch: reentrant})
    host.dispatch(S.resolve("begin"))
    assert host.state.log[-1] == "loaded queued"


def test_runaway_call_loop_is_stopped() -> None:
    def loop(event) -> U.Update:
        return S.call("again")

    host = Host(0, loop, config={"host.max_dispatch": 5})
    with pytest.raises(DispatchLimitError, match="more than 5 events"):
        host.dispatch(S.resolve("again"))
    assert len(host.history) == 5


def test_unhandled_effects_are_kept() -> None:
    host = Host(0, lambda event: U.push(lambda n: ("log", event)))
    host.dispatch("hi")
    assert host.effects == [("log", "hi")]


def test_make_config_defaults() -> None:
    assert make_config() == DEFAULT_CONFIG
    assert make_config({"host.max_dispatch": 3})["host.max_dispatch"] == 3


def test_make_config_rejects_unknown_keys() -> None:
    with pytest.raises(KeyError, match="host.max_dispach"):
        make_config({"host.max_dispach": 3})


@pytest.mark.parametrize("limit", [0, -1, "10"])
def test_make_config_rejects_bad_limit(limit) -> None:
    with pytest.raises(ValueError):
        make_config({"host.max_dispatch": limit})


@dataclass(frozen=True)
class Explode:
    reason: str


def test_failed_drain_discards_pending_events() -> None:
    """Events queued before a handler raised are not replayed by the next dispatch."""

    def record(event) -> U.Update:
        if event == "start":
            return U.batch([S.call("leftover"), U.push(lambda seen: Explode("handler down"))])
        return U.modify(lambda seen: seen + [event])

    def explode(effect: Explode):
        raise RuntimeError(effect.reason)

    host = Host([], record, handlers={Explode: explode})
    with pytest.raises(RuntimeError, match="handler down"):
        host.dispatch("start")

    host.dispatch("unrelated")
    assert host.state == ["unrelated"]
    assert host.history == ["start", "unrelated"]


def test_failed_update_for_does_not_block_later_dispatch() -> None:
    def picky(event) -> U.Update:
        if event == "bad":
            raise ValueError("unknown event")
        return U.modify(lambda n: n + 1)

    host = Host(0, picky)
    with pytest.raises(ValueError):
        host.dispatch("bad")
    assert host.dispatch("good") == 1
