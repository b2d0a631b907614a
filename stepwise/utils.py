"""
Utility functions for the stepwise library.
"""

import os
from collections.abc import Callable
from typing import Any

# Environment variable to control debug mode
DEBUG_UPDATES = os.environ.get("STEPWISE_DEBUG", "").lower() in ("1", "true", "yes")


def safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception as repr_error:  # pragma: no cover - repr of user types
        return f"<repr failed: {repr_error!r}>"


def ensure_callable(value: Any, role: str) -> Callable[..., Any]:
    """Return ``value`` unchanged or raise ``TypeError`` naming its role."""

    if not callable(value):
        raise TypeError(f"{role} must be callable; got {type(value).__name__}")
    return value


__all__ = ["DEBUG_UPDATES", "ensure_callable", "safe_repr"]
