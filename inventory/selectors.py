"""Selectors for the inventory domain."""

from .models import InventoryItem, StockTransaction


def transactions_for_item(item_id: str):
    return StockTransaction.objects.filter(item_id=item_id).order_by("-created_at", "id")


def recent_transactions(limit: int = 10) -> list[StockTransaction]:
    return list(StockTransaction.objects.order_by("-created_at", "id")[: max(int(limit), 0)])


def item_lookup(item_ids) -> dict[str, InventoryItem]:
    return {item.id: item for item in InventoryItem.objects.filter(pk__in=set(item_ids))}


def inventory_snapshot() -> tuple[list[InventoryItem], list[StockTransaction]]:
    """Fetch every item and transaction for on-demand aggregation."""
    items = list(InventoryItem.objects.all())
    transactions = list(StockTransaction.objects.order_by("created_at", "id"))
    return items, transactions


# EOF
