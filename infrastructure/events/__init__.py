from .event_bus_interface import EventBus
from .memory_event_bus import InMemoryEventBus, get_event_bus


__all__ = ["EventBus", "InMemoryEventBus", "get_event_bus"]
