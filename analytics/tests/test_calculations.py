from datetime import datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest
from analytics import calculations
from analytics.calculations import (
    category_breakdown,
    compute_daily_summaries,
    compute_stats,
    profit_trend,
    range_start,
    stock_alerts,
    summarize_transactions,
    top_performers,
)
from inventory.models import InventoryItem, StockTransaction

NOW = datetime(2025, 3, 15, 14, 30, tzinfo=dt_timezone.utc)


def make_item(item_id="i1", stock=10, buy="10.00", sell="15.00", min_level=2, max_level=None, category="General"):
    return InventoryItem(
        id=item_id,
        name=f"Item {item_id}",
        category=category,
        sku=f"SKU-{item_id}",
        current_stock=stock,
        min_stock_level=min_level,
        max_stock_level=max_level,
        buy_price=Decimal(buy),
        sell_price=Decimal(sell),
    )


def make_txn(item_id="i1", txn_type="stock_out", quantity=1, unit_price="15.00", created_at=NOW, txn_id=None):
    unit = Decimal(unit_price)
    return StockTransaction(
        id=txn_id or f"t-{item_id}-{txn_type}-{quantity}-{unit_price}-{created_at}",
        item_id=item_id,
        type=txn_type,
        quantity=quantity,
        unit_price=unit,
        total_amount=unit * quantity,
        created_at=created_at,
    )


def test_stats_counts_and_value():
    items = [
        make_item("a", stock=10, buy="2.00", min_level=2),
        make_item("b", stock=2, buy="5.00", min_level=2),
        make_item("c", stock=0, buy="7.00", min_level=2),
    ]
    stats = compute_stats(items, [], NOW)
    assert stats.total_items == 3
    assert stats.total_value == Decimal("30.00")
    assert stats.low_stock_count == 1
    assert stats.out_of_stock_count == 1


def test_stats_profit_and_loss():
    item = make_item(buy="10.00")
    txns = [
        make_txn(quantity=20, txn_type="stock_in", unit_price="10.00"),
        make_txn(quantity=5, unit_price="15.00"),
    ]
    stats = compute_stats([item], txns, NOW)
    assert stats.total_profit == Decimal("25.00")
    assert stats.total_loss == 0

    txns.append(make_txn(quantity=5, unit_price="8.00"))
    stats = compute_stats([item], txns, NOW)
    assert stats.total_profit == Decimal("25.00")
    assert stats.total_loss == Decimal("10.00")


def test_stats_monthly_bucket_uses_calendar_month():
    item = make_item(buy="10.00")
    txns = [
        make_txn(quantity=1, unit_price="12.00", created_at=datetime(2025, 3, 1, 0, 0, tzinfo=dt_timezone.utc)),
        make_txn(quantity=1, unit_price="13.00", created_at=datetime(2025, 2, 28, 23, 59, tzinfo=dt_timezone.utc)),
        make_txn(quantity=1, unit_price="9.00", created_at=datetime(2024, 3, 10, tzinfo=dt_timezone.utc)),
    ]
    stats = compute_stats([item], txns, NOW)
    assert stats.total_profit == Decimal("5.00")
    assert stats.monthly_profit == Decimal("2.00")
    assert stats.total_loss == Decimal("1.00")
    assert stats.monthly_loss == 0


def test_stats_skip_orphans_and_other_types():
    item = make_item(buy="10.00")
    txns = [
        make_txn(item_id="gone", quantity=3, unit_price="50.00"),
        make_txn(txn_type="adjustment", quantity=3, unit_price="50.00"),
        make_txn(txn_type="transfer", quantity=3, unit_price="50.00"),
    ]
    stats = compute_stats([item], txns, NOW)
    assert stats.total_profit == 0 and stats.total_loss == 0


def test_stats_is_idempotent():
    items = [make_item("a"), make_item("b", buy="4.00")]
    txns = [make_txn("a", quantity=2), make_txn("b", quantity=3, unit_price="3.00")]
    assert compute_stats(items, txns, NOW) == compute_stats(items, txns, NOW)


def test_profit_minus_loss_equals_signed_margin_sum():
    items = [make_item("a", buy="10.00"), make_item("b", buy="3.00")]
    txns = [
        make_txn("a", quantity=4, unit_price="12.50"),
        make_txn("a", quantity=2, unit_price="9.00"),
        make_txn("a", quantity=1, unit_price="10.00"),
        make_txn("b", quantity=7, unit_price="2.25"),
        make_txn("b", quantity=3, unit_price="5.00"),
        make_txn("b", txn_type="stock_in", quantity=9, unit_price="3.00"),
    ]
    buy = {item.id: item.buy_price for item in items}
    signed = sum(
        (t.unit_price - buy[t.item_id]) * t.quantity for t in txns if t.type == StockTransaction.TYPE_STOCK_OUT
    )
    stats = compute_stats(items, txns, NOW)
    assert stats.total_profit - stats.total_loss == signed


def test_unparsable_dates_are_skipped_not_fatal():
    item = make_item(buy="10.00")
    bad = make_txn(quantity=1, unit_price="20.00", txn_id="bad")
    bad.created_at = "not-a-date"
    good = make_txn(quantity=1, unit_price="12.00", txn_id="good")
    stats = compute_stats([item], [bad, good], NOW)
    assert stats.total_profit == Decimal("2.00")
    report = compute_daily_summaries([item], [bad, good], "all", NOW)
    assert report.days[0].total_transactions_count == 1


def test_string_timestamps_are_accepted():
    item = make_item(buy="10.00")
    txn = make_txn(quantity=2, unit_price="11.00")
    txn.created_at = "2025-03-15T09:00:00Z"
    report = compute_daily_summaries([item], [txn], "all", NOW)
    assert report.days[0].date == "2025-03-15"
    assert report.days[0].gross_profit_from_sales == Decimal("2.00")


@pytest.mark.parametrize(
    "range_name, expected",
    [
        ("today", datetime(2025, 3, 15, tzinfo=dt_timezone.utc)),
        ("week", datetime(2025, 3, 9, tzinfo=dt_timezone.utc)),
        ("month", datetime(2025, 2, 14, tzinfo=dt_timezone.utc)),
        ("quarter", datetime(2024, 12, 16, tzinfo=dt_timezone.utc)),
        ("all", None),
        ("fortnight", None),
    ],
)
def test_range_start(range_name, expected):
    assert range_start(range_name, NOW) == expected


def test_daily_summaries_group_by_day_newest_first():
    item = make_item(buy="10.00")
    day1 = datetime(2025, 3, 13, 10, tzinfo=dt_timezone.utc)
    day2 = datetime(2025, 3, 14, 10, tzinfo=dt_timezone.utc)
    txns = [
        make_txn(txn_type="stock_in", quantity=10, unit_price="10.00", created_at=day1),
        make_txn(quantity=2, unit_price="15.00", created_at=day2),
        make_txn(quantity=1, unit_price="7.00", created_at=day2),
        make_txn(quantity=1, unit_price="10.00", created_at=day2),
        make_txn(item_id="gone", quantity=1, unit_price="99.00", created_at=day2),
    ]
    report = compute_daily_summaries([item], txns, "all", NOW)
    assert report.summary is None
    assert [d.date for d in report.days] == ["2025-03-14", "2025-03-13"]

    latest, earliest = report.days
    assert latest.total_transactions_count == 4
    assert latest.total_money_in == Decimal("146.00")
    assert latest.total_money_out == 0
    assert latest.net_flow == Decimal("146.00")
    assert latest.gross_profit_from_sales == Decimal("10.00")
    assert latest.loss_from_below_cost_sales == Decimal("3.00")

    assert earliest.total_money_out == Decimal("100.00")
    assert earliest.net_flow == Decimal("-100.00")


def test_week_excludes_transactions_older_than_seven_days():
    item = make_item(buy="10.00")
    txns = [
        make_txn(quantity=1, unit_price="20.00", created_at=NOW - timedelta(days=8)),
        make_txn(quantity=1, unit_price="12.00", created_at=NOW - timedelta(days=6)),
        make_txn(quantity=1, unit_price="11.00", created_at=NOW),
    ]
    report = compute_daily_summaries([item], txns, "week", NOW)
    assert [d.date for d in report.days] == ["2025-03-15", "2025-03-09"]
    assert report.summary.date == "2025-03-09 - 2025-03-15"
    assert report.summary.total_transactions_count == 2
    assert report.summary.total_money_in == Decimal("23.00")
    assert report.summary.gross_profit_from_sales == Decimal("3.00")


def test_folded_label_spans_oldest_to_newest_active_day():
    item = make_item(buy="10.00")
    txns = [
        make_txn(quantity=1, unit_price="12.00", created_at=NOW - timedelta(days=2)),
        make_txn(quantity=1, unit_price="11.00", created_at=NOW),
    ]
    report = compute_daily_summaries([item], txns, "month", NOW)
    assert [d.date for d in report.days] == ["2025-03-15", "2025-03-13"]
    assert report.summary.date == "2025-03-13 - 2025-03-15"


def test_folded_label_falls_back_to_window_without_activity():
    report = compute_daily_summaries([make_item()], [], "week", NOW)
    assert report.days == []
    assert report.summary.date == "2025-03-09 - 2025-03-15"
    assert report.summary.total_transactions_count == 0


def test_folded_label_covers_utc_days_under_local_time_zone(settings):
    settings.TIME_ZONE = "Asia/Tokyo"
    item = make_item(buy="10.00")
    # 2025-03-09 01:00 in Tokyo, inside the local week window
    sale = make_txn(quantity=1, unit_price="12.00", created_at=datetime(2025, 3, 8, 16, 0, tzinfo=dt_timezone.utc))
    report = compute_daily_summaries([item], [sale], "week", NOW)
    assert [d.date for d in report.days] == ["2025-03-08"]
    assert report.summary.date == "2025-03-08 - 2025-03-08"
    assert report.summary.total_transactions_count == 1


def test_today_returns_single_zeroed_summary_without_activity():
    item = make_item()
    report = compute_daily_summaries([item], [make_txn(created_at=NOW - timedelta(days=1))], "today", NOW)
    assert len(report.days) == 1
    assert report.summary.date == "2025-03-15"
    assert report.summary.total_transactions_count == 0
    assert report.summary.total_money_in == 0


def test_unknown_range_behaves_like_all():
    item = make_item()
    old = make_txn(created_at=NOW - timedelta(days=400))
    report = compute_daily_summaries([item], [old], "decade", NOW)
    assert report.range == "all"
    assert len(report.days) == 1 and report.summary is None


def test_profit_trend_has_one_point_per_day_oldest_first():
    item = make_item(buy="10.00")
    txns = [
        make_txn(quantity=2, unit_price="15.00", created_at=NOW),
        make_txn(quantity=1, unit_price="8.00", created_at=NOW - timedelta(days=2)),
        make_txn(quantity=1, unit_price="8.00", created_at=NOW - timedelta(days=10)),
    ]
    points = profit_trend([item], txns, NOW, days=7)
    assert len(points) == 7
    assert points[0].date == "2025-03-09" and points[-1].date == "2025-03-15"
    assert points[-1].profit == Decimal("10.00") and points[-1].revenue == Decimal("30.00")
    assert points[-3].profit == Decimal("-2.00")


def test_category_breakdown_percentages():
    items = [
        make_item("a", stock=3, buy="10.00", category="Coffee"),
        make_item("b", stock=1, buy="10.00", category="Coffee"),
        make_item("c", stock=6, buy="10.00", category="Tea"),
    ]
    rows = category_breakdown(items)
    assert [(r.category, r.value, r.items, r.percentage) for r in rows] == [
        ("Tea", Decimal("60.00"), 1, Decimal("60.00")),
        ("Coffee", Decimal("40.00"), 2, Decimal("40.00")),
    ]


def test_category_breakdown_zero_total():
    rows = category_breakdown([make_item(stock=0)])
    assert rows[0].percentage == 0


def test_top_performers_ranked_by_profit():
    a = make_item("a", buy="10.00")
    b = make_item("b", buy="1.00")
    c = make_item("c")
    txns = [
        make_txn("a", quantity=2, unit_price="12.00"),
        make_txn("b", quantity=3, unit_price="5.00"),
        make_txn("c", txn_type="stock_in", quantity=3, unit_price="10.00"),
    ]
    ranked = top_performers([a, b, c], txns, limit=10)
    assert [p.item.id for p in ranked] == ["b", "a"]
    assert ranked[0].profit == Decimal("12.00")
    assert ranked[0].revenue == Decimal("15.00")
    assert ranked[0].units_sold == 3
    assert len(top_performers([a, b, c], txns, limit=1)) == 1


def test_stock_alerts():
    items = [
        make_item("out", stock=0),
        make_item("low", stock=2, min_level=2),
        make_item("over", stock=50, max_level=40),
        make_item("fine", stock=20, max_level=40),
    ]
    alerts = stock_alerts(items)
    assert [i.id for i in alerts.critical] == ["out"]
    assert [i.id for i in alerts.warning] == ["low"]
    assert [i.id for i in alerts.overstock] == ["over"]


def test_summarize_transactions():
    item = make_item(buy="10.00")
    first = NOW - timedelta(days=3)
    txns = [
        make_txn(txn_type="stock_in", quantity=10, unit_price="10.00", created_at=first),
        make_txn(quantity=4, unit_price="15.00"),
        make_txn(txn_type="adjustment", quantity=5, unit_price="10.00"),
        make_txn(item_id="gone", quantity=1, unit_price="5.00"),
    ]
    summary = summarize_transactions([item], txns)
    assert summary.total_transactions == 4
    assert summary.total_purchase_value == Decimal("100.00")
    assert summary.total_sale_value == Decimal("65.00")
    assert summary.total_adjustments == 1
    assert summary.net_cash_flow == Decimal("-35.00")
    assert summary.gross_profit == Decimal("20.00")
    assert summary.period_start == first
    assert summary.period_end == NOW


def test_summarize_empty():
    summary = summarize_transactions([], [])
    assert summary.total_transactions == 0
    assert summary.period_start is None


def test_skipped_records_are_logged(caplog):
    txn = make_txn()
    txn.created_at = None
    with caplog.at_level("DEBUG", logger="stockroom.analytics"):
        calculations.compute_daily_summaries([make_item()], [txn], "all", NOW)
    assert any(getattr(r, "event", None) == "analytics.record_skipped" for r in caplog.records)
