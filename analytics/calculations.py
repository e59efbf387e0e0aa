"""Financial aggregation over inventory snapshots.

Every function here is pure: it takes items and transactions (model
instances or any objects with the same attribute names) plus ``now`` and
returns plain dataclasses. Nothing is read from or written to the database,
so the same inputs always produce the same report.

Profit and loss compare a stock_out's unit price with the item's *current*
buy price. Transactions whose item no longer exists are skipped for
profit/loss. A transaction with an unreadable timestamp or amount is skipped
on its own instead of failing the whole report.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from common.choices import SummaryRange, TransactionType
from django.utils import timezone
from django.utils.dateparse import parse_datetime

logger = logging.getLogger("stockroom.analytics")

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

# Days before today included in each named window
RANGE_DAYS = {
    SummaryRange.TODAY: 0,
    SummaryRange.WEEK: 6,
    SummaryRange.MONTH: 29,
    SummaryRange.QUARTER: 89,
}


class SkipRecord(Exception):
    """A single record could not be read; the caller drops it."""


@dataclass
class InventoryStats:
    total_items: int = 0
    total_value: Decimal = ZERO
    low_stock_count: int = 0
    out_of_stock_count: int = 0
    total_profit: Decimal = ZERO
    total_loss: Decimal = ZERO
    monthly_profit: Decimal = ZERO
    monthly_loss: Decimal = ZERO


@dataclass
class DaySummary:
    """Totals for one calendar day, or for a whole window when folded.

    ``date`` is the ISO date for a single day and ``"YYYY-MM-DD - YYYY-MM-DD"``
    for a folded window.
    """

    date: str
    total_transactions_count: int = 0
    total_money_in: Decimal = ZERO
    total_money_out: Decimal = ZERO
    net_flow: Decimal = ZERO
    gross_profit_from_sales: Decimal = ZERO
    loss_from_below_cost_sales: Decimal = ZERO

    def add(self, other: "DaySummary") -> None:
        for f in fields(self):
            if f.name != "date":
                setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))


@dataclass
class DailySummaryReport:
    range: str
    days: list[DaySummary] = field(default_factory=list)
    summary: DaySummary | None = None


@dataclass
class TrendPoint:
    date: str
    profit: Decimal = ZERO
    revenue: Decimal = ZERO


@dataclass
class CategoryBreakdown:
    category: str
    value: Decimal = ZERO
    items: int = 0
    percentage: Decimal = ZERO


@dataclass
class TopPerformer:
    item: object
    profit: Decimal = ZERO
    revenue: Decimal = ZERO
    units_sold: int = 0


@dataclass
class StockAlerts:
    critical: list = field(default_factory=list)
    warning: list = field(default_factory=list)
    overstock: list = field(default_factory=list)


@dataclass
class TransactionSummary:
    total_transactions: int = 0
    total_purchase_value: Decimal = ZERO
    total_sale_value: Decimal = ZERO
    total_adjustments: int = 0
    net_cash_flow: Decimal = ZERO
    gross_profit: Decimal = ZERO
    period_start: datetime | None = None
    period_end: datetime | None = None


def _money(value) -> Decimal:
    if value is None or isinstance(value, bool):
        raise SkipRecord(f"not a number: {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise SkipRecord(f"not a number: {value!r}")
    if not amount.is_finite():
        raise SkipRecord(f"not a number: {value!r}")
    return amount


def _quantity(value) -> int:
    amount = _money(value)
    if amount != amount.to_integral_value():
        raise SkipRecord(f"not a whole quantity: {value!r}")
    return int(amount)


def _created_at(txn) -> datetime:
    value = getattr(txn, "created_at", None)
    if isinstance(value, str):
        try:
            value = parse_datetime(value.strip())
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        raise SkipRecord(f"unreadable created_at: {getattr(txn, 'created_at', None)!r}")
    if timezone.is_naive(value):
        value = timezone.make_aware(value, dt_timezone.utc)
    return value


def _skip(txn, exc: SkipRecord) -> None:
    logger.debug(
        "analytics.record_skipped",
        extra={"event": "analytics.record_skipped", "transaction_id": getattr(txn, "id", None), "reason": str(exc)},
    )


def _utc_date(moment: datetime) -> date:
    return moment.astimezone(dt_timezone.utc).date()


def _items_by_id(items) -> dict:
    return {item.id: item for item in items}


def _margin(txn, item) -> Decimal:
    """Signed (unit_price - buy_price) * quantity for one stock_out."""
    return (_money(txn.unit_price) - _money(item.buy_price)) * _quantity(txn.quantity)


def compute_stats(items, transactions, now: datetime) -> InventoryStats:
    items = list(items)
    stats = InventoryStats(total_items=len(items))
    for item in items:
        stock = int(item.current_stock)
        stats.total_value += stock * _money(item.buy_price)
        if stock == 0:
            stats.out_of_stock_count += 1
        elif stock <= int(item.min_stock_level):
            stats.low_stock_count += 1

    local_now = timezone.localtime(now)
    lookup = _items_by_id(items)
    for txn in transactions:
        if txn.type != TransactionType.STOCK_OUT:
            continue
        item = lookup.get(txn.item_id)
        if item is None:
            continue
        try:
            margin = _margin(txn, item)
            created = timezone.localtime(_created_at(txn))
        except SkipRecord as exc:
            _skip(txn, exc)
            continue
        this_month = (created.year, created.month) == (local_now.year, local_now.month)
        if margin > 0:
            stats.total_profit += margin
            if this_month:
                stats.monthly_profit += margin
        else:
            stats.total_loss += -margin
            if this_month:
                stats.monthly_loss += -margin
    return stats


def range_start(range_name: str, now: datetime) -> datetime | None:
    """Start of a named window: local midnight, N days back. ``None`` means unbounded."""
    days = RANGE_DAYS.get(range_name)
    if days is None:
        return None
    midnight = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=days)


def _summarize_day(day: date, transactions, lookup) -> DaySummary:
    summary = DaySummary(date=day.isoformat())
    for txn in transactions:
        summary.total_transactions_count += 1
        amount = _money(txn.total_amount)
        if txn.type == TransactionType.STOCK_OUT:
            summary.total_money_in += amount
            item = lookup.get(txn.item_id)
            if item is not None:
                margin = _margin(txn, item)
                if margin > 0:
                    summary.gross_profit_from_sales += margin
                elif margin < 0:
                    summary.loss_from_below_cost_sales += -margin
        elif txn.type == TransactionType.STOCK_IN:
            summary.total_money_out += amount
    summary.net_flow = summary.total_money_in - summary.total_money_out
    return summary


def compute_daily_summaries(items, transactions, range_name: str = SummaryRange.ALL, now=None) -> DailySummaryReport:
    """Group transactions by UTC day, newest first, within a named window.

    ``today`` yields a single summary (zeroed when there was no activity);
    ``week``, ``month`` and ``quarter`` add a summary folding every day in
    the window, labelled from its oldest day to its newest; anything else
    returns the full per-day list.
    """
    now = now or timezone.now()
    start = range_start(range_name, now)
    lookup = _items_by_id(items)

    by_day = defaultdict(list)
    for txn in transactions:
        try:
            created = _created_at(txn)
            # Validate amounts up front so a bad record never half-counts
            _money(txn.total_amount)
            if txn.type == TransactionType.STOCK_OUT and txn.item_id in lookup:
                _margin(txn, lookup[txn.item_id])
        except SkipRecord as exc:
            _skip(txn, exc)
            continue
        if start is not None and created < start:
            continue
        by_day[_utc_date(created)].append(txn)

    days = [_summarize_day(day, by_day[day], lookup) for day in sorted(by_day, reverse=True)]

    if range_name == SummaryRange.TODAY:
        today = DaySummary(date=timezone.localtime(now).date().isoformat())
        for day in days:
            today.add(day)
        return DailySummaryReport(range=range_name, days=[today], summary=today)

    if start is not None:
        if days:
            label = f"{days[-1].date} - {days[0].date}"
        else:
            label = f"{start.date().isoformat()} - {timezone.localtime(now).date().isoformat()}"
        folded = DaySummary(date=label)
        for day in days:
            folded.add(day)
        return DailySummaryReport(range=range_name, days=days, summary=folded)

    return DailySummaryReport(range=SummaryRange.ALL, days=days)


def profit_trend(items, transactions, now: datetime, days: int = 30) -> list[TrendPoint]:
    """Daily signed profit and revenue from sales for the trailing ``days`` days, oldest first.

    Days are UTC dates, so with a non-UTC ``TIME_ZONE`` the last point can differ
    from the local ``today`` summary.
    """
    today = _utc_date(now)
    points = {}
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points[day] = TrendPoint(date=day.isoformat())
    lookup = _items_by_id(items)
    for txn in transactions:
        if txn.type != TransactionType.STOCK_OUT:
            continue
        item = lookup.get(txn.item_id)
        if item is None:
            continue
        try:
            point = points.get(_utc_date(_created_at(txn)))
            if point is None:
                continue
            margin = _margin(txn, item)
            revenue = _money(txn.total_amount)
        except SkipRecord as exc:
            _skip(txn, exc)
            continue
        point.profit += margin
        point.revenue += revenue
    return list(points.values())


def category_breakdown(items) -> list[CategoryBreakdown]:
    """Inventory value per category with its share of the total, largest first."""
    rows: dict[str, CategoryBreakdown] = {}
    total = ZERO
    for item in items:
        value = int(item.current_stock) * _money(item.buy_price)
        total += value
        row = rows.setdefault(item.category, CategoryBreakdown(category=item.category))
        row.value += value
        row.items += 1
    for row in rows.values():
        if total > 0:
            row.percentage = (row.value * 100 / total).quantize(CENT, rounding=ROUND_HALF_UP)
    return sorted(rows.values(), key=lambda r: (-r.value, r.category))


def top_performers(items, transactions, limit: int = 10) -> list[TopPerformer]:
    """Items with sales revenue, ranked by profit."""
    performers = {item.id: TopPerformer(item=item) for item in items}
    for txn in transactions:
        if txn.type != TransactionType.STOCK_OUT:
            continue
        performer = performers.get(txn.item_id)
        if performer is None:
            continue
        try:
            margin = _margin(txn, performer.item)
            revenue = _money(txn.total_amount)
            quantity = _quantity(txn.quantity)
        except SkipRecord as exc:
            _skip(txn, exc)
            continue
        performer.profit += margin
        performer.revenue += revenue
        performer.units_sold += quantity
    ranked = sorted((p for p in performers.values() if p.revenue > 0), key=lambda p: -p.profit)
    return ranked[: max(limit, 0)]


def stock_alerts(items) -> StockAlerts:
    alerts = StockAlerts()
    for item in items:
        stock = int(item.current_stock)
        if stock == 0:
            alerts.critical.append(item)
        elif stock <= int(item.min_stock_level):
            alerts.warning.append(item)
        if item.max_stock_level is not None and stock > int(item.max_stock_level):
            alerts.overstock.append(item)
    return alerts


def summarize_transactions(items, transactions) -> TransactionSummary:
    """Totals over a (usually filtered) set of transactions."""
    summary = TransactionSummary()
    lookup = _items_by_id(items)
    for txn in transactions:
        try:
            amount = _money(txn.total_amount)
            created = _created_at(txn)
            item = lookup.get(txn.item_id) if txn.type == TransactionType.STOCK_OUT else None
            margin = _margin(txn, item) if item is not None else ZERO
        except SkipRecord as exc:
            _skip(txn, exc)
            continue
        summary.total_transactions += 1
        if txn.type == TransactionType.STOCK_IN:
            summary.total_purchase_value += amount
        elif txn.type == TransactionType.STOCK_OUT:
            summary.total_sale_value += amount
        elif txn.type == TransactionType.ADJUSTMENT:
            summary.total_adjustments += 1
        summary.gross_profit += margin
        if summary.period_start is None or created < summary.period_start:
            summary.period_start = created
        if summary.period_end is None or created > summary.period_end:
            summary.period_end = created
    summary.net_cash_flow = summary.total_sale_value - summary.total_purchase_value
    return summary


# EOF
