from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class StockReservedEvent(DomainEvent):
    """Event: Stock decremented for an order line."""

    def __init__(self, product_id: str, quantity: int, new_stock: int, order_id: str = None):
        super().__init__(
            event_type="stock.reserved",
            payload={"product_id": product_id, "quantity": quantity, "new_stock": new_stock, "order_id": order_id},
        )


@dataclass
class StockReleasedEvent(DomainEvent):
    """Event: Stock returned to inventory."""

    def __init__(self, product_id: str, quantity: int, new_stock: int, reason: str):
        super().__init__(
            event_type="stock.released",
            payload={"product_id": product_id, "quantity": quantity, "new_stock": new_stock, "reason": reason},
        )
