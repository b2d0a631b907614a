"""In-memory host loop.

Holds one state value, turns each dispatched event into an Update, and
routes the resulting effects. ``ResolveEffect`` events go back on the
queue and are handled after the current evaluation finishes. Other
effects go to the handler registered for their type, which may answer
with a follow-up event.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from stepwise import update as _update
from stepwise.config import make_config
from stepwise.effects import is_resolve_effect
from stepwise.errors import DispatchLimitError
from stepwise.update import Update
from stepwise.utils import ensure_callable, safe_repr

logger = logging.getLogger(__name__)

S = TypeVar("S")

EffectHandler = Callable[[Any], Any]


class Host(Generic[S]):
    """Reference event loop around :func:`stepwise.update.run`.

    Usage:
        host = Host(initial_state, update_for)
        host.dispatch(Clicked())
        host.state, host.effects
    """

    def __init__(
        self,
        state: S,
        update_for: Callable[[Any], Update[S, Any]],
        handlers: Mapping[type, EffectHandler] | None = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        self.state = state
        self.update_for = ensure_callable(update_for, "update_for")
        self.handlers: dict[type, EffectHandler] = {
            effect_type: ensure_callable(handler, f"handler for {effect_type.__name__}")
            for effect_type, handler in (handlers or {}).items()
        }
        self.config = make_config(config)
        self.effects: list[Any] = []
        self.history: list[Any] = []
        self._queue: deque[Any] = deque()
        self._draining = False

    def dispatch(self, event: Any) -> S:
        """Queue ``event`` and process the queue until it is empty.

        Calling ``dispatch`` from inside a handler only queues the event.
        """
        self._queue.append(event)
        if self._draining:
            return self.state
        self._draining = True
        try:
            self._drain()
        except BaseException:
            # events queued by the failed drain never reach a later dispatch
            self._queue.clear()
            raise
        finally:
            self._draining = False
        return self.state

    def _drain(self) -> None:
        limit = self.config["host.max_dispatch"]
        processed = 0
        while self._queue:
            processed += 1
            if processed > limit:
                self._queue.clear()
                raise DispatchLimitError(limit)
            event = self._queue.popleft()
            self.history.append(event)
            logger.debug(f"host: dispatching {safe_repr(event)}")
            update = self.update_for(event)
            self.state, emitted = _update.run(update, self.state)
            self.effects.extend(emitted)
            for effect in emitted:
                self._route(effect)

    def _route(self, effect: Any) -> None:
        if is_resolve_effect(effect):
            self._queue.append(effect.event)
            return
        handler = self.handlers.get(type(effect))
        if handler is None:
            if self.config["debug"]:
                logger.warning(f"host: no handler for effect {safe_repr(effect)}")
            return
        follow_up = handler(effect)
        if follow_up is not None:
            self._queue.append(follow_up)


__all__ = ["EffectHandler", "Host"]
