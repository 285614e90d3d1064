"""Push-event bus between collaborators and the session controller."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

AI_RESPONSE_CHUNK = "ai_response_chunk"
AI_RESPONSE_COMPLETE = "ai_response_complete"
TOGGLE_WINDOW_EVENT = "toggle_window_event"

Handler = Callable[[Any], None]


class Subscription:
    """Handle returned by :meth:`EventBus.subscribe`."""

    def __init__(self, bus: EventBus, name: str, handler: Handler) -> None:
        self._bus = bus
        self.name = name
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._remove(self.name, self._handler)


class EventBus:
    """Synchronous named-event fan-out.

    Handlers run on the emitter's thread in subscription order. A failing
    handler is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, name: str, handler: Handler) -> Subscription:
        self._handlers[name].append(handler)
        return Subscription(self, name, handler)

    def emit(self, name: str, payload: Any = None) -> None:
        for handler in list(self._handlers.get(name, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed", name)

    def subscriber_count(self, name: str) -> int:
        return len(self._handlers.get(name, ()))

    def _remove(self, name: str, handler: Handler) -> None:
        handlers = self._handlers.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)
