from datetime import timedelta
from decimal import Decimal

import pytest
from analytics.models import DailySummary
from analytics.services import inventory_stats, refresh_daily_summaries
from django.core.management import call_command
from django.utils import timezone
from inventory.services import create_item, record_transaction
from inventory.tests.factories import InventoryItemFactory, StockTransactionFactory

BASE = "/api/v1/analytics/"


@pytest.fixture
def coffee(db):
    return create_item(
        name="Espresso beans",
        category="Coffee",
        sku="COF-001",
        current_stock=0,
        min_stock_level=5,
        buy_price="10.00",
        sell_price="15.00",
    )


@pytest.mark.django_db
def test_ledger_to_stats_scenario(coffee):
    txn = record_transaction(item_id=coffee.id, txn_type="stock_in", quantity=20, unit_price="10.00")
    coffee.refresh_from_db()
    assert coffee.current_stock == 20
    assert txn.total_amount == Decimal("200.00")

    record_transaction(item_id=coffee.id, txn_type="stock_out", quantity=5, unit_price="15.00")
    coffee.refresh_from_db()
    assert coffee.current_stock == 15
    stats = inventory_stats()
    assert stats.total_profit == Decimal("25.00")
    assert stats.total_loss == 0

    record_transaction(item_id=coffee.id, txn_type="stock_out", quantity=5, unit_price="8.00")
    stats = inventory_stats()
    assert stats.total_profit == Decimal("25.00")
    assert stats.total_loss == Decimal("10.00")

    record_transaction(item_id=coffee.id, txn_type="stock_out", quantity=100, unit_price="15.00")
    coffee.refresh_from_db()
    assert coffee.current_stock == 0


@pytest.mark.django_db
def test_analytics_requires_staff(api_client):
    assert api_client.get(f"{BASE}stats/").status_code in (401, 403)


@pytest.mark.django_db
def test_stats_endpoint(staff_client, coffee):
    record_transaction(item_id=coffee.id, txn_type="stock_in", quantity=4, unit_price="10.00")
    record_transaction(item_id=coffee.id, txn_type="stock_out", quantity=2, unit_price="15.00")
    resp = staff_client.get(f"{BASE}stats/")
    assert resp.status_code == 200
    assert resp.data["total_items"] == 1
    assert resp.data["total_value"] == "20.00"
    assert resp.data["low_stock_count"] == 1
    assert resp.data["total_profit"] == "10.00"
    assert resp.data["monthly_profit"] == "10.00"


@pytest.mark.django_db
def test_daily_summaries_endpoint_week(staff_client):
    item = InventoryItemFactory(buy_price=Decimal("10.00"))
    now = timezone.now()
    StockTransactionFactory(
        item_id=item.id, type="stock_out", quantity=1, unit_price=Decimal("20.00"), created_at=now - timedelta(days=8)
    )
    StockTransactionFactory(
        item_id=item.id, type="stock_out", quantity=1, unit_price=Decimal("12.00"), created_at=now
    )

    resp = staff_client.get(f"{BASE}daily-summaries/", {"range": "week"})
    assert resp.status_code == 200
    assert resp.data["range"] == "week"
    assert len(resp.data["days"]) == 1
    assert resp.data["summary"]["total_transactions_count"] == 1
    assert resp.data["summary"]["total_money_in"] == "12.00"
    assert resp.data["summary"]["gross_profit_from_sales"] == "2.00"

    resp_all = staff_client.get(f"{BASE}daily-summaries/")
    assert resp_all.data["summary"] is None
    assert len(resp_all.data["days"]) == 2


@pytest.mark.django_db
def test_daily_summaries_today_without_activity(staff_client):
    resp = staff_client.get(f"{BASE}daily-summaries/", {"range": "today"})
    assert resp.status_code == 200
    assert resp.data["summary"]["total_transactions_count"] == 0
    assert resp.data["summary"]["net_flow"] == "0.00"


@pytest.mark.django_db
def test_profit_trend_endpoint(staff_client):
    resp = staff_client.get(f"{BASE}profit-trend/", {"days": 5})
    assert resp.status_code == 200
    assert len(resp.data) == 5
    resp = staff_client.get(f"{BASE}profit-trend/", {"days": "junk"})
    assert len(resp.data) == 30


@pytest.mark.django_db
def test_categories_alerts_and_top_performers(staff_client):
    fast = InventoryItemFactory(category="Coffee", current_stock=0, buy_price=Decimal("10.00"))
    InventoryItemFactory(category="Tea", current_stock=5, buy_price=Decimal("4.00"))
    StockTransactionFactory(item_id=fast.id, type="stock_out", quantity=3, unit_price=Decimal("15.00"))

    categories = staff_client.get(f"{BASE}categories/").data
    assert [row["category"] for row in categories] == ["Tea", "Coffee"]
    assert categories[0]["percentage"] == "100.00"

    alerts = staff_client.get(f"{BASE}stock-alerts/").data
    assert [row["id"] for row in alerts["critical"]] == [fast.id]

    top = staff_client.get(f"{BASE}top-performers/", {"limit": 5}).data
    assert len(top) == 1
    assert top[0]["item"]["id"] == fast.id
    assert top[0]["profit"] == "15.00"
    assert top[0]["units_sold"] == 3


@pytest.mark.django_db
def test_transaction_summary_respects_filters(staff_client):
    item = InventoryItemFactory(buy_price=Decimal("10.00"))
    StockTransactionFactory(item_id=item.id, type="stock_in", quantity=10, unit_price=Decimal("10.00"))
    StockTransactionFactory(item_id=item.id, type="stock_out", quantity=2, unit_price=Decimal("15.00"))

    resp = staff_client.get(f"{BASE}transaction-summary/")
    assert resp.status_code == 200
    assert resp.data["total_transactions"] == 2
    assert resp.data["net_cash_flow"] == "-70.00"

    resp = staff_client.get(f"{BASE}transaction-summary/", {"type": "stock_out"})
    assert resp.data["total_transactions"] == 1
    assert resp.data["gross_profit"] == "10.00"

    bad = staff_client.get(f"{BASE}transaction-summary/", {"created_after": "yesterday-ish"})
    assert bad.status_code == 400


@pytest.mark.django_db
def test_refresh_daily_summaries_matches_report():
    item = InventoryItemFactory(buy_price=Decimal("10.00"))
    now = timezone.now()
    StockTransactionFactory(
        item_id=item.id, type="stock_out", quantity=2, unit_price=Decimal("15.00"), created_at=now
    )
    StockTransactionFactory(
        item_id=item.id, type="stock_in", quantity=1, unit_price=Decimal("10.00"), created_at=now - timedelta(days=3)
    )
    DailySummary.objects.create(date=(now - timedelta(days=30)).date())

    assert refresh_daily_summaries(now=now) == 2
    rows = list(DailySummary.objects.all())
    assert [r.date for r in rows] == [now.date(), (now - timedelta(days=3)).date()]
    assert rows[0].gross_profit_from_sales == Decimal("10.00")
    assert rows[1].total_money_out == Decimal("10.00")

    # Rebuilding from unchanged data stores the same rows
    assert refresh_daily_summaries(now=now) == 2
    assert DailySummary.objects.count() == 2


@pytest.mark.django_db
def test_refresh_daily_summaries_command():
    StockTransactionFactory()
    call_command("refresh_daily_summaries")
    assert DailySummary.objects.count() == 1
