"""
OrderRepository - persistence for orders and their lines.

Reads return OrderRecord values. Status changes go through a compare-and-set
UPDATE so that two concurrent transitions from the same state cannot both win.
"""

from decimal import Decimal
from typing import Iterable, List, Optional

from django.db.models import Prefetch
from django.utils import timezone

from marketplace.ordering.domain.models.order import Order, OrderItem, OrderStatus
from marketplace.ordering.domain.records import OrderLineRecord, OrderPage, OrderRecord
from marketplace.ordering.domain.state_machine import TIMESTAMP_FIELDS


class OrderRepository:
    def create(self, buyer, lines: Iterable) -> Order:
        """
        Insert a PENDING order and its price-snapshotted lines.

        ``lines`` are PricedLine values; their order is kept as ``position``.
        """
        lines = list(lines)
        total = sum((line.line_total for line in lines), Decimal("0.00"))
        order = Order.objects.create(buyer=buyer, status=OrderStatus.PENDING, total_amount=total)
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    seller_id=line.seller_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    total_price=line.line_total,
                    product_name=line.product_name,
                    position=position,
                )
                for position, line in enumerate(lines)
            ]
        )
        return order

    def get(self, order_id) -> Optional[OrderRecord]:
        order = self._queryset().filter(id=order_id).first()
        return self.to_record(order) if order else None

    def get_owner_id(self, order_id) -> Optional[int]:
        return Order.objects.filter(id=order_id).values_list("buyer_id", flat=True).first()

    def get_status(self, order_id) -> Optional[str]:
        return Order.objects.filter(id=order_id).values_list("status", flat=True).first()

    def line_quantities(self, order_id) -> List[tuple]:
        return list(
            OrderItem.objects.filter(order_id=order_id).order_by("product_id").values_list("product_id", "quantity")
        )

    def list_for_buyer(self, buyer, status: Optional[str] = None, page: int = 1, page_size: int = 20) -> OrderPage:
        queryset = self._queryset().filter(buyer=buyer)
        if status:
            queryset = queryset.filter(status=status)
        count = queryset.count()
        offset = (page - 1) * page_size
        records = tuple(self.to_record(order) for order in queryset[offset : offset + page_size])
        return OrderPage(results=records, count=count, page=page, page_size=page_size)

    def compare_and_set_status(self, order_id, from_status: str, to_status: str, **extra) -> bool:
        """
        Move the order from ``from_status`` to ``to_status`` if it is still in
        ``from_status``. Returns False when another writer got there first.
        """
        now = timezone.now()
        fields = {"status": to_status, "updated_at": now, **extra}
        timestamp_field = TIMESTAMP_FIELDS.get(to_status)
        if timestamp_field:
            fields[timestamp_field] = now
        return Order.objects.filter(id=order_id, status=from_status).update(**fields) == 1

    def _queryset(self):
        return Order.objects.prefetch_related(Prefetch("items", queryset=OrderItem.objects.order_by("position", "id")))

    @staticmethod
    def to_record(order: Order) -> OrderRecord:
        return OrderRecord(
            id=str(order.id),
            buyer_id=order.buyer_id,
            status=order.status,
            total_amount=order.total_amount,
            created_at=order.created_at,
            lines=tuple(
                OrderLineRecord(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    seller_id=item.seller_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                )
                for item in order.items.all()
            ),
            validated_at=order.validated_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            cancellation_reason=order.cancellation_reason,
        )
