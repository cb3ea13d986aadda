from .statistics_service import PERIOD_DAYS, StatisticsService, period_window

__all__ = ["PERIOD_DAYS", "StatisticsService", "period_window"]
