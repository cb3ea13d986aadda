from abc import ABC, abstractmethod
from typing import Callable


class EventBus(ABC):
    """Publish/subscribe contract for domain events."""

    @abstractmethod
    def publish(self, event_type: str, payload: dict):
        """Publish an event to every handler subscribed to ``event_type``."""

    @abstractmethod
    def subscribe(self, event_type: str, handler: Callable):
        """Register ``handler`` for ``event_type``. Handlers receive the full event envelope."""
