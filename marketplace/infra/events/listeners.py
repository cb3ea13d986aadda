import logging

from django.conf import settings
from django.utils import timezone

from infrastructure.events import get_event_bus
from marketplace.ordering.domain.models.order import Order
from marketplace.ordering.domain.state_machine import COUNTED_STATUSES


logger = logging.getLogger(__name__)


def handle_order_placed(event_data):
    """Handle order.placed event."""
    payload = event_data.get("payload", {})
    logger.info(
        f"[Marketplace Listener] Order placed: {payload.get('order_id')} "
        f"({payload.get('line_count')} lines, total {payload.get('total_amount')})"
    )


def handle_order_status_changed(event_data):
    """
    Handle order.status_changed event.

    Recomputes the cached daily sales row of every seller in the order. The row
    is rebuilt from the ledger, so a late or repeated event converges. When the
    order starts counting toward sales, its sellers are re-evaluated for promotion.
    """
    from infrastructure.container import container

    payload = event_data.get("payload", {})
    order_id = payload.get("order_id")
    order = Order.objects.filter(id=order_id).only("id", "created_at").first()
    if order is None:
        logger.error(f"[Marketplace Listener] Order {order_id} vanished before stats refresh")
        return

    day = timezone.localdate(order.created_at)
    seller_ids = set(order.items.values_list("seller_id", flat=True))
    statistics_service = container.statistics_service()
    for seller_id in seller_ids:
        statistics_service.materialize_daily_stats(seller_id, day)

    if payload.get("to_status") in COUNTED_STATUSES:
        grade_service = container.grade_service()
        for seller_id in seller_ids:
            grade_service.promote_seller(seller_id)

    logger.info(
        f"[Marketplace Listener] Order {order_id} {payload.get('from_status')} -> {payload.get('to_status')}: "
        f"refreshed {len(seller_ids)} seller stat row(s) for {day}"
    )


def handle_order_cancelled(event_data):
    """Handle order.cancelled event."""
    payload = event_data.get("payload", {})
    logger.info(
        f"[Marketplace Listener] Order {payload.get('order_id')} cancelled from {payload.get('from_status')}: "
        f"{payload.get('reason') or 'no reason given'}"
    )


def handle_stock_movement(event_data):
    """Warn when a product drops to the low stock threshold."""
    payload = event_data.get("payload", {})
    threshold = settings.MARKETPLACE.get("LOW_STOCK_THRESHOLD", 5)
    new_stock = payload.get("new_stock")
    if new_stock is not None and new_stock <= threshold:
        logger.warning(f"[Marketplace Listener] Low stock: product {payload.get('product_id')} at {new_stock}")


def register_marketplace_listeners(event_bus=None):
    """Register all marketplace event listeners."""
    event_bus = event_bus or get_event_bus()
    event_bus.subscribe("order.placed", handle_order_placed)
    event_bus.subscribe("order.status_changed", handle_order_status_changed)
    event_bus.subscribe("order.cancelled", handle_order_cancelled)
    event_bus.subscribe("stock.reserved", handle_stock_movement)
    event_bus.subscribe("stock.released", handle_stock_movement)
    logger.info("Marketplace event listeners registered")
