from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.utils import timezone

from infrastructure.events import InMemoryEventBus
from marketplace.cart.domain.services import CartLine
from marketplace.infra.events.listeners import (
    handle_order_status_changed,
    handle_stock_movement,
    register_marketplace_listeners,
)
from marketplace.models import OrderStatus, SalesStatistic, Seller
from marketplace.ordering.domain.services import OrderService
from marketplace.tests.factories import (
    AdminFactory,
    OrderItemFactory,
    ProductFactory,
    SellerGradeFactory,
    UserFactory,
)


class ListenerTests(TestCase):
    def setUp(self):
        self.product = ProductFactory(price=Decimal("25.00"), stock_quantity=10)
        self.seller = self.product.boutique.seller

    def test_status_change_refreshes_seller_stats(self):
        item = OrderItemFactory(product=self.product, quantity=2, order__status=OrderStatus.VALIDATED)
        event_data = {
            "event_type": "order.status_changed",
            "payload": {"order_id": str(item.order_id), "from_status": "pending", "to_status": "validated"},
        }

        handle_order_status_changed(event_data)
        handle_order_status_changed(event_data)

        row = SalesStatistic.objects.get(seller=self.seller)
        self.assertEqual(row.date, timezone.localdate(item.order.created_at))
        self.assertEqual(row.units_sold, 2)
        self.assertEqual(row.revenue, Decimal("50.00"))
        self.assertEqual(row.order_count, 1)

    def test_status_change_for_missing_order_is_logged(self):
        with self.assertLogs("marketplace.infra.events.listeners", level="ERROR"):
            handle_order_status_changed({"payload": {"order_id": "00000000-0000-0000-0000-000000000000"}})

        self.assertFalse(SalesStatistic.objects.exists())

    @override_settings(MARKETPLACE={"LOW_STOCK_THRESHOLD": 3})
    def test_low_stock_warning(self):
        with self.assertLogs("marketplace.infra.events.listeners", level="WARNING") as logs:
            handle_stock_movement({"payload": {"product_id": "p-1", "new_stock": 2}})

        self.assertIn("Low stock: product p-1 at 2", logs.output[0])

    @override_settings(MARKETPLACE={"LOW_STOCK_THRESHOLD": 3})
    def test_no_warning_above_threshold(self):
        with patch("marketplace.infra.events.listeners.logger") as logger:
            handle_stock_movement({"payload": {"product_id": "p-1", "new_stock": 4}})

        logger.warning.assert_not_called()

    def test_validation_flows_into_stats_through_the_bus(self):
        event_bus = InMemoryEventBus()
        register_marketplace_listeners(event_bus)
        service = OrderService(event_bus=event_bus)

        with self.captureOnCommitCallbacks(execute=True):
            order = service.checkout(UserFactory(), [CartLine(str(self.product.id), 3)]).value
        self.assertFalse(SalesStatistic.objects.exists())

        with self.captureOnCommitCallbacks(execute=True):
            service.advance_status(order.id, "validated", actor=AdminFactory())

        row = SalesStatistic.objects.get(seller=self.seller)
        self.assertEqual(row.units_sold, 3)
        self.assertEqual(row.revenue, Decimal("75.00"))

    def test_counted_status_promotes_sellers(self):
        silver = SellerGradeFactory(rank=2, name="Silver", min_sales=1, min_revenue=Decimal("20.00"))
        item = OrderItemFactory(product=self.product, quantity=1, order__status=OrderStatus.VALIDATED)

        handle_order_status_changed(
            {"payload": {"order_id": str(item.order_id), "from_status": "pending", "to_status": "validated"}}
        )

        self.assertEqual(Seller.objects.get(id=self.seller.id).grade, silver)

    def test_cancellation_does_not_promote(self):
        SellerGradeFactory(rank=2, name="Silver", min_sales=0, min_revenue=Decimal("0.00"))
        item = OrderItemFactory(product=self.product, quantity=1, order__status=OrderStatus.CANCELLED)

        handle_order_status_changed(
            {"payload": {"order_id": str(item.order_id), "from_status": "pending", "to_status": "cancelled"}}
        )

        self.assertEqual(Seller.objects.get(id=self.seller.id).grade.rank, 1)
