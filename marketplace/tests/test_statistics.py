from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from marketplace.analytics.domain.services import StatisticsService
from marketplace.models import OrderStatus, SalesStatistic
from marketplace.services.base import ErrorCodes
from marketplace.tests.factories import (
    AdminFactory,
    BoutiqueFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    UserFactory,
)


class StatisticsTestCase(TestCase):
    def setUp(self):
        self.service = StatisticsService()
        self.now = timezone.now()
        self.boutique = BoutiqueFactory()
        self.seller = self.boutique.seller
        self.chair = ProductFactory(boutique=self.boutique, price=Decimal("50.00"))
        self.table = ProductFactory(boutique=self.boutique, price=Decimal("120.00"))

    def sell(self, product, quantity, status=OrderStatus.VALIDATED, days_ago=1, order=None):
        if order is None:
            order = OrderFactory(status=status, created_at=self.now - timedelta(days=days_ago))
        OrderItemFactory(order=order, product=product, quantity=quantity)
        order.total_amount = sum(item.total_price for item in order.items.all())
        order.save()
        return order


class AggregateTest(StatisticsTestCase):
    def test_pending_order_contributes_nothing_until_validated(self):
        order = self.sell(self.chair, 2, status=OrderStatus.PENDING)

        stats = self.service.aggregate(self.seller.id, "30d", now=self.now).value
        self.assertEqual(stats.units_sold, 0)
        self.assertEqual(stats.revenue, Decimal("0.00"))
        self.assertEqual(stats.average_order_value, Decimal("0.00"))
        self.assertEqual(stats.top_products, ())

        order.status = OrderStatus.VALIDATED
        order.save()

        stats = self.service.aggregate(self.seller.id, "30d", now=self.now).value
        self.assertEqual(stats.units_sold, 2)
        self.assertEqual(stats.revenue, Decimal("100.00"))
        self.assertEqual(stats.order_count, 1)

    def test_cancelled_orders_are_ignored(self):
        self.sell(self.chair, 1, status=OrderStatus.CANCELLED)
        self.sell(self.chair, 1, status=OrderStatus.DELIVERED)

        stats = self.service.aggregate(self.seller.id, "7d", now=self.now).value

        self.assertEqual(stats.units_sold, 1)
        self.assertEqual(stats.order_count, 1)

    def test_revenue_is_the_sellers_share_of_shared_orders(self):
        other = ProductFactory(price=Decimal("999.00"))
        order = self.sell(self.table, 1)
        self.sell(other, 1, order=order)

        stats = self.service.aggregate(self.seller.id, "30d", now=self.now).value

        self.assertEqual(stats.revenue, Decimal("120.00"))
        self.assertEqual(stats.units_sold, 1)

    def test_average_order_value_rounds_half_up(self):
        cheap = ProductFactory(boutique=self.boutique, price=Decimal("10.01"))
        self.sell(cheap, 1)
        self.sell(cheap, 1)
        self.sell(self.chair, 1)

        stats = self.service.aggregate(self.seller.id, "30d", now=self.now).value

        # 70.02 / 3 = 23.34
        self.assertEqual(stats.revenue, Decimal("70.02"))
        self.assertEqual(stats.average_order_value, Decimal("23.34"))

    def test_top_products_rank_by_units_then_product_id(self):
        self.sell(self.chair, 3)
        self.sell(self.table, 3)
        lamp = ProductFactory(boutique=self.boutique, price=Decimal("5.00"))
        self.sell(lamp, 7)

        stats = self.service.aggregate(self.seller.id, "30d", top_n=3, now=self.now).value

        tied = sorted([str(self.chair.id), str(self.table.id)])
        self.assertEqual([p.product_id for p in stats.top_products], [str(lamp.id)] + tied)
        self.assertEqual(stats.top_products[0].units_sold, 7)
        self.assertEqual(stats.top_products[0].revenue, Decimal("35.00"))

    def test_period_window_filters_on_order_date(self):
        self.sell(self.chair, 1, days_ago=3)
        self.sell(self.chair, 2, days_ago=20)
        self.sell(self.chair, 4, days_ago=200)

        units = {
            period: self.service.aggregate(self.seller.id, period, now=self.now).value.units_sold
            for period in ("7d", "30d", "90d", "1y")
        }

        self.assertEqual(units, {"7d": 1, "30d": 3, "90d": 3, "1y": 7})

    def test_invalid_period_and_unknown_seller(self):
        result = self.service.aggregate(self.seller.id, "2w")
        self.assertEqual(result.error, ErrorCodes.INVALID_PERIOD)
        self.assertEqual(result.error_context["allowed"], ["7d", "30d", "90d", "1y"])
        self.assertEqual(self.service.aggregate(987654, "30d").error, ErrorCodes.SELLER_NOT_FOUND)


class BoutiqueStatisticsAccessTest(StatisticsTestCase):
    def test_owner_and_staff_can_read(self):
        self.sell(self.chair, 1)

        owner_view = self.service.boutique_statistics(self.boutique.id, self.seller.user, "30d")
        staff_view = self.service.boutique_statistics(self.boutique.id, AdminFactory(), "30d")

        self.assertEqual(owner_view.value.units_sold, 1)
        self.assertEqual(staff_view.value.units_sold, 1)

    def test_other_user_is_rejected(self):
        result = self.service.boutique_statistics(self.boutique.id, UserFactory(), "30d")

        self.assertEqual(result.error, ErrorCodes.NOT_BOUTIQUE_OWNER)

    def test_unknown_boutique_and_period(self):
        self.assertEqual(
            self.service.boutique_statistics(987654, self.seller.user).error, ErrorCodes.BOUTIQUE_NOT_FOUND
        )
        self.assertEqual(
            self.service.boutique_statistics(self.boutique.id, self.seller.user, "forever").error,
            ErrorCodes.INVALID_PERIOD,
        )

    def test_malformed_boutique_id_is_not_found(self):
        for boutique_id in ("abc", "", None, 10**30):
            result = self.service.boutique_statistics(boutique_id, self.seller.user)
            self.assertEqual(result.error, ErrorCodes.BOUTIQUE_NOT_FOUND, boutique_id)


class DerivedStatisticsTest(StatisticsTestCase):
    def test_daily_breakdown_groups_by_day(self):
        self.sell(self.chair, 1, days_ago=2)
        self.sell(self.chair, 2, days_ago=2)
        self.sell(self.table, 1, days_ago=1)
        self.sell(self.table, 5, status=OrderStatus.PENDING, days_ago=1)

        days = self.service.daily_breakdown(self.seller.id, "7d", now=self.now).value

        self.assertEqual([day.units_sold for day in days], [3, 1])
        self.assertEqual(days[0].order_count, 2)
        self.assertEqual(days[0].revenue, Decimal("150.00"))
        self.assertLess(days[0].date, days[1].date)

    def test_materialize_overwrites_from_ledger(self):
        order = self.sell(self.chair, 2, days_ago=0)
        day = timezone.localdate(order.created_at)

        first = self.service.materialize_daily_stats(self.seller.id, day).value
        self.assertEqual((first.units_sold, first.revenue, first.order_count), (2, Decimal("100.00"), 1))

        order.status = OrderStatus.CANCELLED
        order.save()
        self.service.materialize_daily_stats(self.seller.id, day)
        self.service.materialize_daily_stats(self.seller.id, day)

        row = SalesStatistic.objects.get(seller=self.seller, date=day)
        self.assertEqual(row.units_sold, 0)
        self.assertEqual(row.revenue, Decimal("0.00"))
        self.assertEqual(SalesStatistic.objects.filter(seller=self.seller).count(), 1)

    def test_compare_periods(self):
        self.sell(self.chair, 2, days_ago=3)
        self.sell(self.chair, 1, days_ago=10)

        comparison = self.service.compare_periods(self.seller.id, "7d", now=self.now).value

        self.assertEqual(comparison.units_sold.current, Decimal("2"))
        self.assertEqual(comparison.units_sold.previous, Decimal("1"))
        self.assertEqual(comparison.units_sold.absolute_change, Decimal("1"))
        self.assertEqual(comparison.units_sold.percentage_change, Decimal("100.00"))
        self.assertEqual(comparison.revenue.current, Decimal("100.00"))

    def test_compare_periods_without_history(self):
        self.sell(self.chair, 1, days_ago=1)

        comparison = self.service.compare_periods(self.seller.id, "30d", now=self.now).value

        self.assertIsNone(comparison.order_count.percentage_change)
        self.assertEqual(self.service.compare_periods(self.seller.id, "1d").error, ErrorCodes.INVALID_PERIOD)

    def test_lifetime_totals(self):
        self.sell(self.chair, 1, days_ago=400)
        self.sell(self.table, 1, days_ago=1)
        self.sell(self.table, 1, status=OrderStatus.PENDING)

        self.assertEqual(self.service.lifetime_totals(self.seller.id), (2, Decimal("170.00")))
