from decimal import Decimal

from django.db import models


class DailySummary(models.Model):
    """Cached per-day totals, rebuilt by ``refresh_daily_summaries``.

    API reports never read this table; they always aggregate the ledger.
    """

    date = models.DateField(primary_key=True)
    total_transactions_count = models.PositiveIntegerField(default=0)
    total_money_in = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    total_money_out = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    net_flow = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    gross_profit_from_sales = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    loss_from_below_cost_sales = models.DecimalField(max_digits=16, decimal_places=2, default=Decimal("0.00"))
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date"]
        verbose_name_plural = "daily summaries"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.date} net={self.net_flow}"


# EOF
