"""Configuration defaults for the reference host loop.

Values are plain ``key -> value`` pairs, merged with caller overrides.
"""

from __future__ import annotations

from typing import Any

from frozendict import frozendict

from stepwise.utils import DEBUG_UPDATES

DEFAULT_CONFIG: frozendict = frozendict(
    {
        "host.max_dispatch": 1000,
        "debug": DEBUG_UPDATES,
    }
)


def make_config(overrides: dict[str, Any] | None = None) -> frozendict:
    """Merge ``overrides`` into :data:`DEFAULT_CONFIG`.

    Unknown keys raise ``KeyError`` so that a misspelt option does not
    silently fall back to its default.
    """
    if not overrides:
        return DEFAULT_CONFIG
    unknown = sorted(set(overrides) - set(DEFAULT_CONFIG))
    if unknown:
        raise KeyError(f"Unknown stepwise config keys: {unknown!r}")
    limit = overrides.get("host.max_dispatch", DEFAULT_CONFIG["host.max_dispatch"])
    if not isinstance(limit, int) or limit < 1:
        raise ValueError(f"host.max_dispatch must be a positive int; got {limit!r}")
    return frozendict({**DEFAULT_CONFIG, **overrides})


__all__ = ["DEFAULT_CONFIG", "make_config"]
