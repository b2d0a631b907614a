from __future__ import annotations

from typing import Any


class LensLawError(AssertionError):
    """Raised when a Lifter does not round-trip a value it was checked with."""

    def __init__(self, law: str, expected: Any, actual: Any) -> None:
        self.law = law
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Lifter violates the {law} law: expected {expected!r}, got {actual!r}"
        )


class DispatchLimitError(RuntimeError):
    """Raised when a host drains more events than ``host.max_dispatch`` allows."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(
            f"Dispatched more than {limit} events in a single drain\n"
            "Hint: a step that `call`s itself unconditionally never settles; "
            "raise `host.max_dispatch` if the chain is intentional"
        )


__all__ = ["DispatchLimitError", "LensLawError"]
