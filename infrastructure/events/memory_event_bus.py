import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, List

from django.conf import settings
from django.utils import timezone

from .event_bus_interface import EventBus


logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    In-process event bus.

    Handlers run synchronously in the publishing thread. A bounded history of
    published envelopes is kept so operators and tests can inspect what the
    core emitted.
    """

    def __init__(self, history_size: int = 1000):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._history: Deque[dict] = deque(maxlen=history_size)
        self._lock = threading.Lock()

    def publish(self, event_type: str, payload: dict):
        message = {"event_type": event_type, "occurred_at": timezone.now().isoformat(), "payload": payload}

        with self._lock:
            self._history.append(message)
            handlers = list(self._subscribers.get(event_type, []))

        logger.info(f"Published event: {event_type}")

        for handler in handlers:
            try:
                handler(message)
            except Exception as e:
                # A failing subscriber must not undo a committed state change
                logger.error(f"Handler error for {event_type}: {str(e)}", exc_info=True)

    def subscribe(self, event_type: str, handler: Callable):
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(handler)
        logger.info(f"Registered handler for event: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        with self._lock:
            handlers = self._subscribers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def history(self, event_type: str = None) -> List[dict]:
        """Return published envelopes, oldest first, optionally filtered by type."""
        with self._lock:
            events = list(self._history)
        if event_type:
            events = [event for event in events if event["event_type"] == event_type]
        return events

    def clear_history(self):
        with self._lock:
            self._history.clear()


# Singleton instance
_event_bus_instance = None
_event_bus_lock = threading.Lock()


def get_event_bus() -> EventBus:
    """Get singleton event bus instance."""
    global _event_bus_instance
    if _event_bus_instance is None:
        with _event_bus_lock:
            if _event_bus_instance is None:
                backend = settings.MARKETPLACE.get("EVENT_BUS_BACKEND", "memory")
                if backend != "memory":
                    raise ValueError(f"Unsupported event bus backend: {backend}")
                _event_bus_instance = InMemoryEventBus()
    return _event_bus_instance
