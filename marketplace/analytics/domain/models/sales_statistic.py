from django.db import models

from marketplace.boutique.domain.models.boutique import Seller


class SalesStatistic(models.Model):
    """
    Per-seller, per-day sales figures.

    Rows are a cache of the order ledger: StatisticsService rebuilds a row from
    OrderItem whenever it is refreshed, and nothing ever increments it in place.
    """

    seller = models.ForeignKey(Seller, on_delete=models.CASCADE, related_name="sales_statistics")
    date = models.DateField()
    units_sold = models.PositiveIntegerField(default=0)
    order_count = models.PositiveIntegerField(default=0)
    revenue = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    refreshed_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        app_label = "marketplace"
        constraints = [
            models.UniqueConstraint(fields=["seller", "date"], name="unique_seller_sales_date"),
        ]

    def __str__(self):
        return f"Sales of seller {self.seller_id} on {self.date}"
