"""
Order status machine.

PENDING -> VALIDATED -> SHIPPED -> DELIVERED, with CANCELLED reachable from
PENDING and VALIDATED. DELIVERED and CANCELLED are terminal.
"""

from typing import Dict, FrozenSet

from marketplace.ordering.domain.models.order import OrderStatus


ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    OrderStatus.PENDING.value: frozenset({OrderStatus.VALIDATED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.VALIDATED.value: frozenset({OrderStatus.SHIPPED.value, OrderStatus.CANCELLED.value}),
    OrderStatus.SHIPPED.value: frozenset({OrderStatus.DELIVERED.value}),
    OrderStatus.DELIVERED.value: frozenset(),
    OrderStatus.CANCELLED.value: frozenset(),
}

# Orders in these states count toward sales statistics
COUNTED_STATUSES: FrozenSet[str] = frozenset(
    {OrderStatus.VALIDATED.value, OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value}
)

# States a buyer may cancel from; fulfillment may also cancel VALIDATED orders
BUYER_CANCELLABLE: FrozenSet[str] = frozenset({OrderStatus.PENDING.value})

TIMESTAMP_FIELDS: Dict[str, str] = {
    OrderStatus.VALIDATED.value: "validated_at",
    OrderStatus.SHIPPED.value: "shipped_at",
    OrderStatus.DELIVERED.value: "delivered_at",
    OrderStatus.CANCELLED.value: "cancelled_at",
}


def can_transition(from_status: str, to_status: str) -> bool:
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def is_terminal(status: str) -> bool:
    return not ALLOWED_TRANSITIONS.get(status)


def releases_stock(to_status: str) -> bool:
    """Entering CANCELLED is the only transition that returns stock."""
    return to_status == OrderStatus.CANCELLED.value
