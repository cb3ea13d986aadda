from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from marketplace.analytics.domain.services.statistics_service import (
    PERIOD_DAYS,
    _delta,
    average_order_value,
    period_window,
)


@pytest.mark.unit
class TestPeriods:
    def test_period_codes(self):
        assert PERIOD_DAYS == {"7d": 7, "30d": 30, "90d": 90, "1y": 365}

    @pytest.mark.parametrize("period,days", [("7d", 7), ("30d", 30), ("90d", 90), ("1y", 365)])
    def test_window_length(self, period, days):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        start, end = period_window(period, now)
        assert end == now
        assert end - start == timedelta(days=days)

    @pytest.mark.parametrize("period", ["", "2w", "30", "1Y", None])
    def test_unknown_period(self, period):
        assert period_window(period) is None


@pytest.mark.unit
class TestAverageOrderValue:
    def test_zero_orders_is_zero(self):
        assert average_order_value(Decimal("0.00"), 0) == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        assert average_order_value(Decimal("10.00"), 3) == Decimal("3.33")
        assert average_order_value(Decimal("0.05"), 2) == Decimal("0.03")


@pytest.mark.unit
class TestDelta:
    def test_percentage_change(self):
        delta = _delta(Decimal("150.00"), Decimal("100.00"))
        assert delta.absolute_change == Decimal("50.00")
        assert delta.percentage_change == Decimal("50.00")

    def test_no_percentage_when_previous_is_zero(self):
        delta = _delta(5, 0)
        assert delta.absolute_change == Decimal("5")
        assert delta.percentage_change is None
