from .base import DomainEvent
from .inventory_events import StockReleasedEvent, StockReservedEvent
from .order_events import OrderCancelledEvent, OrderPlacedEvent, OrderStatusChangedEvent


__all__ = [
    "DomainEvent",
    "OrderPlacedEvent",
    "OrderStatusChangedEvent",
    "OrderCancelledEvent",
    "StockReservedEvent",
    "StockReleasedEvent",
]
