"""Law checks for use in property-style tests."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from stepwise.errors import LensLawError
from stepwise.lifter import Lifter


def check_lens_laws(lifter: Lifter[Any, Any], outer: Any, inner: Any) -> None:
    """Raise :class:`LensLawError` unless ``lifter`` round-trips both ways.

    Checks ``set(get(outer), outer) == outer`` and
    ``get(set(inner, outer)) == inner``.
    """
    written_back = lifter.set(lifter.get(outer), outer)
    if written_back != outer:
        raise LensLawError("get-set", outer, written_back)
    read_back = lifter.get(lifter.set(inner, outer))
    if read_back != inner:
        raise LensLawError("set-get", inner, read_back)


def check_lens_laws_for(lifter: Lifter[Any, Any], cases: Iterable[tuple[Any, Any]]) -> int:
    """Check every ``(outer, inner)`` pair; return how many were checked."""

    checked = 0
    for outer, inner in cases:
        check_lens_laws(lifter, outer, inner)
        checked += 1
    return checked


__all__ = ["check_lens_laws", "check_lens_laws_for"]
