"""Plain data records handed out by the ordering services instead of ORM instances."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class OrderLineRecord:
    product_id: str
    product_name: str
    seller_id: int
    quantity: int
    unit_price: Decimal
    total_price: Decimal


@dataclass(frozen=True)
class OrderRecord:
    id: str
    buyer_id: int
    status: str
    total_amount: Decimal
    created_at: datetime
    lines: Tuple[OrderLineRecord, ...]
    validated_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: str = ""

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


@dataclass(frozen=True)
class OrderPage:
    results: Tuple[OrderRecord, ...]
    count: int
    page: int
    page_size: int

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.count
