"""Export and import of the whole inventory as one JSON document.

Document shape::

    {"inventory": [...items], "transactions": [...entries], "export_date": "<ISO-8601>"}

Import is a destructive replace: both tables are cleared and the supplied
records inserted as given, keeping their ids. Records without an id or
timestamp get fresh ones.
"""

from collections import Counter

from django.utils import timezone

from .models import InventoryItem, StockTransaction, new_record_id
from .serializers import InventoryItemTransferSerializer, StockTransactionTransferSerializer
from .services import InventoryValidationError, replace_all


def export_payload(now=None) -> dict:
    now = now or timezone.now()
    items = InventoryItem.objects.order_by("created_at", "id")
    transactions = StockTransaction.objects.order_by("created_at", "id")
    return {
        "inventory": InventoryItemTransferSerializer(items, many=True).data,
        "transactions": StockTransactionTransferSerializer(transactions, many=True).data,
        "export_date": now.isoformat(),
    }


def _duplicates(values) -> list[str]:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def parse_payload(data) -> tuple[list[InventoryItem], list[StockTransaction]]:
    """Validate an import document and build unsaved model instances."""
    if not isinstance(data, dict):
        raise InventoryValidationError({"payload": "Expected a JSON object"})
    errors = {}
    for key in ("inventory", "transactions"):
        if not isinstance(data.get(key), list):
            errors[key] = "Expected a list"
    if errors:
        raise InventoryValidationError(errors)

    item_serializer = InventoryItemTransferSerializer(data=data["inventory"], many=True)
    txn_serializer = StockTransactionTransferSerializer(data=data["transactions"], many=True)
    items_ok = item_serializer.is_valid()
    txns_ok = txn_serializer.is_valid()
    if not items_ok:
        errors["inventory"] = item_serializer.errors
    if not txns_ok:
        errors["transactions"] = txn_serializer.errors
    if errors:
        raise InventoryValidationError(errors)

    now = timezone.now()
    items = []
    for row in item_serializer.validated_data:
        row = dict(row)
        row.setdefault("id", new_record_id())
        row.setdefault("created_at", now)
        row.setdefault("updated_at", row["created_at"])
        items.append(InventoryItem(**row))

    transactions = []
    for row in txn_serializer.validated_data:
        row = dict(row)
        row.setdefault("id", new_record_id())
        row.setdefault("created_at", now)
        row.setdefault("total_amount", row["unit_price"] * row["quantity"])
        transactions.append(StockTransaction(**row))

    dup_ids = _duplicates(item.id for item in items)
    dup_skus = _duplicates(item.sku for item in items)
    dup_txn_ids = _duplicates(txn.id for txn in transactions)
    if dup_ids or dup_skus:
        errors["inventory"] = {"duplicate_ids": dup_ids, "duplicate_skus": dup_skus}
    if dup_txn_ids:
        errors["transactions"] = {"duplicate_ids": dup_txn_ids}
    if errors:
        raise InventoryValidationError(errors)
    return items, transactions


def import_payload(data) -> tuple[int, int]:
    items, transactions = parse_payload(data)
    return replace_all(items=items, transactions=transactions)


# EOF
