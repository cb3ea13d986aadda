"""
StatisticsService - Seller sales statistics

Everything here is derived from the order ledger (OrderItem joined to Order).
Only orders in a counted status (VALIDATED, SHIPPED, DELIVERED) contribute;
PENDING and CANCELLED orders count for nothing. The SalesStatistic table is a
cache rebuilt from the same queries and is never the source of a figure.

Reads take no locks.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from django.conf import settings
from django.db.models import Count, Max, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from marketplace.analytics.domain.models.sales_statistic import SalesStatistic
from marketplace.boutique.domain.models.boutique import Boutique, Seller
from marketplace.infra.observability.metrics import statistics_duration
from marketplace.ordering.domain.models.order import OrderItem
from marketplace.ordering.domain.state_machine import COUNTED_STATUSES
from marketplace.services.base import BaseService, ErrorCodes, ServiceResult, parse_int_id, service_err, service_ok

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_PERIOD = "30d"

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class ProductSales:
    product_id: str
    product_name: str
    units_sold: int
    revenue: Decimal


@dataclass(frozen=True)
class SellerStatistics:
    seller_id: int
    period: str
    start: datetime
    end: datetime
    units_sold: int
    revenue: Decimal
    order_count: int
    average_order_value: Decimal
    top_products: Tuple[ProductSales, ...]


@dataclass(frozen=True)
class SalesStatRecord:
    date: date
    units_sold: int
    order_count: int
    revenue: Decimal


@dataclass(frozen=True)
class MetricDelta:
    current: Decimal
    previous: Decimal
    absolute_change: Decimal
    percentage_change: Optional[Decimal]


@dataclass(frozen=True)
class PeriodComparison:
    period: str
    units_sold: MetricDelta
    revenue: MetricDelta
    order_count: MetricDelta


def period_window(period: str, now: Optional[datetime] = None) -> Optional[Tuple[datetime, datetime]]:
    """Return ``(start, end)`` for a period code such as "30d", or None for an unknown code."""
    days = PERIOD_DAYS.get(period)
    if days is None:
        return None
    end = now or timezone.now()
    return end - timedelta(days=days), end


def average_order_value(revenue: Decimal, order_count: int) -> Decimal:
    if not order_count:
        return ZERO
    return (revenue / order_count).quantize(CENT, rounding=ROUND_HALF_UP)


def _delta(current, previous) -> MetricDelta:
    current = Decimal(current)
    previous = Decimal(previous)
    change = current - previous
    percentage = None
    if previous:
        percentage = (change / previous * 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return MetricDelta(current=current, previous=previous, absolute_change=change, percentage_change=percentage)


class StatisticsService(BaseService):
    """
    Service for per-seller sales statistics.
    """

    def counted_items(self, seller_id, start: Optional[datetime] = None, end: Optional[datetime] = None):
        """OrderItem rows of ``seller_id`` that count toward sales, optionally within ``[start, end]``."""
        items = OrderItem.objects.filter(seller_id=seller_id, order__status__in=COUNTED_STATUSES)
        if start is not None:
            items = items.filter(order__created_at__gte=start)
        if end is not None:
            items = items.filter(order__created_at__lte=end)
        return items

    def _totals(self, items) -> Tuple[int, Decimal, int]:
        totals = items.aggregate(
            units_sold=Sum("quantity"),
            revenue=Sum("total_price"),
            order_count=Count("order", distinct=True),
        )
        return (
            totals["units_sold"] or 0,
            (totals["revenue"] or ZERO).quantize(CENT),
            totals["order_count"] or 0,
        )

    @BaseService.log_performance
    def aggregate(
        self, seller_id, period: str = DEFAULT_PERIOD, top_n: Optional[int] = None, now: Optional[datetime] = None
    ) -> ServiceResult[SellerStatistics]:
        """
        Units sold, revenue, average order value and top products for a seller.

        Revenue is the seller's share of each order (sum of its own lines).
        ``top_products`` ranks by units sold, ties broken by product id.

        Example:
            >>> result = statistics_service.aggregate(seller.id, "30d")
            >>> if result.ok:
            ...     print(result.value.revenue, result.value.top_products[:3])
        """
        window = period_window(period, now)
        if window is None:
            return service_err(
                ErrorCodes.INVALID_PERIOD,
                f"Unknown period '{period}'",
                allowed=sorted(PERIOD_DAYS, key=PERIOD_DAYS.get),
            )
        if not Seller.objects.filter(id=seller_id).exists():
            return service_err(ErrorCodes.SELLER_NOT_FOUND, f"Seller {seller_id} not found")

        if top_n is None:
            top_n = settings.MARKETPLACE.get("STATISTICS_TOP_N", 5)

        start, end = window
        with statistics_duration.time():
            items = self.counted_items(seller_id, start, end)
            units_sold, revenue, order_count = self._totals(items)

            top_rows = (
                items.values("product_id")
                .annotate(units_sold=Sum("quantity"), revenue=Sum("total_price"), product_name=Max("product_name"))
                .order_by("-units_sold", "product_id")[:top_n]
            )
            top_products = tuple(
                ProductSales(
                    product_id=str(row["product_id"]),
                    product_name=row["product_name"],
                    units_sold=row["units_sold"],
                    revenue=row["revenue"].quantize(CENT),
                )
                for row in top_rows
            )

        return service_ok(
            SellerStatistics(
                seller_id=seller_id,
                period=period,
                start=start,
                end=end,
                units_sold=units_sold,
                revenue=revenue,
                order_count=order_count,
                average_order_value=average_order_value(revenue, order_count),
                top_products=top_products,
            )
        )

    @BaseService.log_performance
    def boutique_statistics(
        self, boutique_id, user, period: str = DEFAULT_PERIOD, now: Optional[datetime] = None
    ) -> ServiceResult[SellerStatistics]:
        """
        Statistics of a boutique's seller, visible to the owner and to staff.
        """
        if period not in PERIOD_DAYS:
            return service_err(ErrorCodes.INVALID_PERIOD, f"Unknown period '{period}'")

        boutique_pk = parse_int_id(boutique_id)
        if boutique_pk is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        boutique = Boutique.objects.select_related("seller").filter(id=boutique_pk).first()
        if boutique is None:
            return service_err(ErrorCodes.BOUTIQUE_NOT_FOUND, f"Boutique {boutique_id} not found")
        if boutique.seller.user_id != user.id and not getattr(user, "is_staff", False):
            return service_err(ErrorCodes.NOT_BOUTIQUE_OWNER, "You do not own this boutique")

        return self.aggregate(boutique.seller_id, period, now=now)

    def daily_breakdown(
        self, seller_id, period: str = DEFAULT_PERIOD, now: Optional[datetime] = None
    ) -> ServiceResult[List[SalesStatRecord]]:
        """Per-day sales records for the period, oldest first. Days without sales are omitted."""
        window = period_window(period, now)
        if window is None:
            return service_err(ErrorCodes.INVALID_PERIOD, f"Unknown period '{period}'")

        rows = (
            self.counted_items(seller_id, *window)
            .annotate(day=TruncDate("order__created_at"))
            .values("day")
            .annotate(units_sold=Sum("quantity"), revenue=Sum("total_price"), order_count=Count("order", distinct=True))
            .order_by("day")
        )
        return service_ok(
            [
                SalesStatRecord(
                    date=row["day"],
                    units_sold=row["units_sold"],
                    order_count=row["order_count"],
                    revenue=row["revenue"].quantize(CENT),
                )
                for row in rows
            ]
        )

    @BaseService.log_performance
    def materialize_daily_stats(self, seller_id, day: date) -> ServiceResult[SalesStatistic]:
        """
        Recompute the SalesStatistic row of ``seller_id`` for ``day`` from the ledger.

        The row is overwritten with fresh figures, never incremented, so running
        this any number of times converges on the ledger.
        """
        if not Seller.objects.filter(id=seller_id).exists():
            return service_err(ErrorCodes.SELLER_NOT_FOUND, f"Seller {seller_id} not found")

        units_sold, revenue, order_count = self._totals(
            self.counted_items(seller_id).filter(order__created_at__date=day)
        )
        statistic, _ = SalesStatistic.objects.update_or_create(
            seller_id=seller_id,
            date=day,
            defaults={"units_sold": units_sold, "revenue": revenue, "order_count": order_count},
        )
        self.logger.debug(f"Refreshed sales of seller {seller_id} on {day}: {units_sold} units, {revenue}")
        return service_ok(statistic)

    def compare_periods(
        self, seller_id, period: str = DEFAULT_PERIOD, now: Optional[datetime] = None
    ) -> ServiceResult[PeriodComparison]:
        """
        Compare the period ending now with the period of equal length before it.

        ``percentage_change`` is None when the previous value is zero.
        """
        window = period_window(period, now)
        if window is None:
            return service_err(ErrorCodes.INVALID_PERIOD, f"Unknown period '{period}'")

        start, end = window
        previous_start = start - timedelta(days=PERIOD_DAYS[period])
        current = self._totals(self.counted_items(seller_id, start, end))
        # Previous window is half-open so an order exactly at ``start`` is counted once
        previous = self._totals(self.counted_items(seller_id, previous_start).filter(order__created_at__lt=start))

        return service_ok(
            PeriodComparison(
                period=period,
                units_sold=_delta(current[0], previous[0]),
                revenue=_delta(current[1], previous[1]),
                order_count=_delta(current[2], previous[2]),
            )
        )

    def lifetime_totals(self, seller_id) -> Tuple[int, Decimal]:
        """All-time ``(order_count, revenue)`` of a seller."""
        _, revenue, order_count = self._totals(self.counted_items(seller_id))
        return order_count, revenue
