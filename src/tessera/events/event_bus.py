from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

ALL_EVENTS = "*"

Handler = Callable[["Event"], None]


@dataclass(frozen=True)
class Event:
    """One grid change notification.

    ``name`` is an EventType value; ``payload`` carries the layer, coordinates
    or counts for that event type.
    """

    name: str
    payload: Dict[str, Any] = field(default_factory=dict)


class EventBus:
    """Fan-out of grid changes to renderers, minimaps and other observers.

    Handlers subscribe to one event name, or to ``ALL_EVENTS`` to mirror every
    change. Name-specific handlers run before catch-all handlers, each group
    in subscription order. A handler that raises is logged and skipped; the
    edit that triggered it has already been applied.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = RLock()

    def subscribe(self, event_name: str, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` and return a callable that removes it again."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        with self._lock:
            self._handlers.setdefault(event_name, []).append(handler)
        logger.debug("Handler %s subscribed to %s", getattr(handler, "__name__", handler), event_name)
        return lambda: self.unsubscribe(event_name, handler)

    def unsubscribe(self, event_name: str, handler: Handler) -> bool:
        with self._lock:
            handlers = self._handlers.get(event_name)
            if not handlers or handler not in handlers:
                return False
            handlers.remove(handler)
            if not handlers:
                del self._handlers[event_name]
        return True

    def has_subscribers(self, event_name: str) -> bool:
        with self._lock:
            return bool(self._handlers.get(event_name) or self._handlers.get(ALL_EVENTS))

    def publish(self, event_name: str, payload: Dict[str, Any]) -> Event:
        event = Event(event_name, payload)
        with self._lock:
            targets = list(self._handlers.get(event_name, ()))
            if event_name != ALL_EVENTS:
                targets.extend(self._handlers.get(ALL_EVENTS, ()))
        for handler in targets:
            try:
                handler(event)
            except Exception:
                logger.exception("Handler for %s failed; continuing", event_name)
        return event
