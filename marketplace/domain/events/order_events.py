from dataclasses import dataclass
from decimal import Decimal

from .base import DomainEvent


@dataclass
class OrderPlacedEvent(DomainEvent):
    """Event: Order placed."""

    def __init__(self, order_id: str, user_id: str, total_amount: Decimal, line_count: int):
        super().__init__(
            event_type="order.placed",
            payload={
                "order_id": order_id,
                "user_id": user_id,
                "total_amount": str(total_amount),
                "line_count": line_count,
            },
        )


@dataclass
class OrderStatusChangedEvent(DomainEvent):
    """Event: Order moved along the status machine."""

    def __init__(self, order_id: str, from_status: str, to_status: str):
        super().__init__(
            event_type="order.status_changed",
            payload={"order_id": order_id, "from_status": from_status, "to_status": to_status},
        )


@dataclass
class OrderCancelledEvent(DomainEvent):
    """Event: Order cancelled."""

    def __init__(self, order_id: str, user_id: str, reason: str, from_status: str):
        super().__init__(
            event_type="order.cancelled",
            payload={
                "order_id": order_id,
                "user_id": user_id,
                "reason": reason,
                "from_status": from_status,
            },
        )
