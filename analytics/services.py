"""Analytics services: fresh ledger snapshots in, reports out.

Each report function reads a new snapshot of items and transactions and
hands it to the pure functions in ``analytics.calculations``.
"""

import logging
from datetime import date

from common.choices import SummaryRange
from django.db import transaction
from django.utils import timezone
from inventory.selectors import inventory_snapshot

from . import calculations
from .models import DailySummary

logger = logging.getLogger("stockroom.analytics")


def inventory_stats(now=None) -> calculations.InventoryStats:
    items, transactions = inventory_snapshot()
    return calculations.compute_stats(items, transactions, now or timezone.now())


def daily_summaries(range_name: str = SummaryRange.ALL, now=None) -> calculations.DailySummaryReport:
    items, transactions = inventory_snapshot()
    return calculations.compute_daily_summaries(items, transactions, range_name, now or timezone.now())


def profit_trend(days: int = 30, now=None) -> list[calculations.TrendPoint]:
    items, transactions = inventory_snapshot()
    return calculations.profit_trend(items, transactions, now or timezone.now(), days=days)


def top_performers(limit: int = 10) -> list[calculations.TopPerformer]:
    items, transactions = inventory_snapshot()
    return calculations.top_performers(items, transactions, limit=limit)


@transaction.atomic
def refresh_daily_summaries(now=None) -> int:
    """Rebuild the DailySummary cache from the full ledger; returns the number of days stored."""
    report = daily_summaries(SummaryRange.ALL, now=now)
    kept = []
    for day in report.days:
        day_date = date.fromisoformat(day.date)
        DailySummary.objects.update_or_create(
            date=day_date,
            defaults={
                "total_transactions_count": day.total_transactions_count,
                "total_money_in": day.total_money_in,
                "total_money_out": day.total_money_out,
                "net_flow": day.net_flow,
                "gross_profit_from_sales": day.gross_profit_from_sales,
                "loss_from_below_cost_sales": day.loss_from_below_cost_sales,
            },
        )
        kept.append(day_date)
    removed, _ = DailySummary.objects.exclude(date__in=kept).delete()
    logger.info(
        "analytics.summaries_refreshed",
        extra={"event": "analytics.summaries_refreshed", "days": len(kept), "removed": removed},
    )
    return len(kept)


# EOF
