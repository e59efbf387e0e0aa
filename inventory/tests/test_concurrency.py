import threading
from typing import List
from unittest import mock

import pytest
from django.db import close_old_connections, connection
from django.utils import timezone
from inventory import services
from inventory.models import InventoryItem, StockTransaction
from inventory.services import ConcurrentUpdateError, record_transaction
from inventory.tests.factories import InventoryItemFactory


@pytest.mark.django_db
def test_swap_stock_only_applies_to_expected_version():
    item = InventoryItemFactory(current_stock=10, version=4)
    now = timezone.now()

    assert services._swap_stock(item_id=item.id, expected_version=3, new_stock=1, now=now) is False
    item.refresh_from_db()
    assert (item.current_stock, item.version) == (10, 4)

    assert services._swap_stock(item_id=item.id, expected_version=4, new_stock=7, now=now) is True
    item.refresh_from_db()
    assert (item.current_stock, item.version) == (7, 5)


@pytest.mark.django_db
def test_lost_swap_rolls_back_the_transaction():
    item = InventoryItemFactory(current_stock=10)
    with mock.patch.object(services, "_swap_stock", return_value=False):
        with pytest.raises(ConcurrentUpdateError):
            record_transaction(item_id=item.id, txn_type="stock_in", quantity=5, unit_price="10.00")
    item.refresh_from_db()
    assert item.current_stock == 10
    assert not StockTransaction.objects.filter(item_id=item.id).exists()


@pytest.mark.django_db
def test_lost_swap_maps_to_conflict(staff_client):
    item = InventoryItemFactory(current_stock=10)
    with mock.patch.object(services, "_swap_stock", return_value=False):
        resp = staff_client.post(
            "/api/v1/inventory/transactions/",
            {"item_id": item.id, "type": "stock_in", "quantity": 1, "unit_price": "10.00"},
            format="json",
        )
    assert resp.status_code == 409


def _record_worker(barrier: threading.Barrier, item_id: str, errors: List[Exception]):
    close_old_connections()
    barrier.wait()
    try:
        record_transaction(item_id=item_id, txn_type="stock_out", quantity=1, unit_price="15.00")
    except Exception as exc:  # pragma: no cover
        errors.append(exc)
    finally:
        close_old_connections()


@pytest.mark.django_db(transaction=True)
def test_threaded_stock_outs_are_not_lost():
    if connection.vendor == "sqlite":
        pytest.skip("SQLite lacks real concurrent transactions; skipping threaded test.")
    item = InventoryItemFactory(current_stock=20)
    workers = 8
    barrier = threading.Barrier(workers)
    errors: List[Exception] = []

    threads = [threading.Thread(target=_record_worker, args=(barrier, item.id, errors)) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    item = InventoryItem.objects.get(pk=item.id)
    # Every committed stock_out is reflected exactly once
    recorded = StockTransaction.objects.filter(item_id=item.id).count()
    assert recorded + len(errors) == workers
    assert item.current_stock == 20 - recorded
