"""Effect descriptors emitted by stepwise itself.

Applications pick their own effect types; the only descriptor the library
produces on its own is :class:`ResolveEffect`, emitted by
:func:`stepwise.sequence.call`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ResolveEffect:
    """Ask the effect runtime to deliver ``event`` back as a new event.

    The runtime must deliver it through its normal dispatch channel, after
    the evaluation that produced it has finished.
    """

    event: Any


def is_resolve_effect(effect: object) -> bool:
    return isinstance(effect, ResolveEffect)


__all__ = ["ResolveEffect", "is_resolve_effect"]
