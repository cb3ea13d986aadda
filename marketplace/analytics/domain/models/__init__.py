from .sales_statistic import SalesStatistic


__all__ = [
    "SalesStatistic",
]
