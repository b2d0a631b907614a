"""
Tests for Lifter composition and the round-trip laws.
"""

from dataclasses import dataclass, replace

import pytest
from frozendict import frozendict

from stepwise import LensLawError, Lifter
from stepwise import lifter as L
from stepwise import update as U
from stepwise.testing import check_lens_laws, check_lens_laws_for


@dataclass(frozen=True)
class Address:
    city: str = "Kyoto"
    zip_code: str = "600-0000"


@dataclass(frozen=True)
class Profile:
    name: str = "Ann"
    address: Address = Address()


@dataclass(frozen=True)
class App:
    profile: Profile = Profile()
    visits: int = 0


PROFILE = L.attr("profile")
ADDRESS = L.attr("address")
CITY = L.attr("city")


@pytest.mark.parametrize(
    ("lifter", "outer", "inner"),
    [
        (PROFILE, App(), Profile(name="Bo")),
        (L.attr("visits"), App(visits=3), 9),
        (L.key("a"), {"a": 1, "b": 2}, 5),
        (L.key("a"), frozendict({"a": 1}), 7),
        (L.identity(), App(), App(visits=1)),
        (L.compose(PROFILE, ADDRESS), App(), Address(city="Oslo")),
        (PROFILE >> ADDRESS >> CITY, App(), "Lima"),
        (L.compose(L.key("user"), L.attr("name")), {"user": Profile()}, "Cy"),
    ],
)
def test_lens_laws_hold(lifter: Lifter, outer, inner) -> None:
    """set(get(o), o) == o and get(set(i, o)) == i."""
    check_lens_laws(lifter, outer, inner)


def test_composed_set_writes_through_middle_value() -> None:
    """Composition keeps the sibling fields of the middle value."""
    app = App(profile=Profile(name="Dee", address=Address(zip_code="123")))
    updated = L.compose(L.compose(PROFILE, ADDRESS), CITY).set("Rome", app)
    assert updated == App(profile=Profile(name="Dee", address=Address(city="Rome", zip_code="123")))


def test_key_keeps_frozendict_type() -> None:
    updated = L.key("a").set(2, frozendict({"a": 1, "b": 1}))
    assert isinstance(updated, frozendict)
    assert updated == frozendict({"a": 2, "b": 1})


def test_key_does_not_mutate_plain_dict() -> None:
    original = {"a": 1}
    updated = L.key("a").set(2, original)
    assert original == {"a": 1}
    assert updated == {"a": 2}


def test_run_matches_child() -> None:
    update = U.batch([U.modify(lambda n: n + 1), U.push(lambda n: n)])
    via_lifter = L.run(L.attr("visits"), update)
    via_child = U.child(lambda a: a.visits, lambda n, a: replace(a, visits=n), update)
    assert U.run(via_lifter, App()) == U.run(via_child, App()) == (App(visits=1), [1])


def test_method_forms() -> None:
    nested = PROFILE.compose(L.attr("name"))
    state, _ = U.run(nested.run(U.modify(str.upper)), App())
    assert state.profile.name == "ANN"


def test_broken_lifter_is_reported() -> None:
    forgetful = Lifter(lambda app: app.visits, lambda n, app: App())
    with pytest.raises(LensLawError, match="get-set"):
        check_lens_laws(forgetful, App(visits=2), 2)

    lossy = Lifter(lambda app: app.visits, lambda n, app: replace(app, visits=n % 10))
    with pytest.raises(LensLawError, match="set-get"):
        check_lens_laws(lossy, App(), 12)


def test_check_many_cases() -> None:
    cases = [(App(visits=n), n * 2) for n in range(5)]
    assert check_lens_laws_for(L.attr("visits"), cases) == 5


def test_lifter_requires_callables() -> None:
    with pytest.raises(TypeError, match="Lifter.set must be callable"):
        Lifter(lambda o: o, None)


def test_attr_requires_name_string() -> None:
    with pytest.raises(TypeError):
        L.attr(3)
