"""Inventory services: the stock ledger.

Every change to an item's stock goes through ``record_transaction``, which
appends an immutable ``StockTransaction`` and moves ``current_stock`` in the
same database transaction. Item rows are locked with ``select_for_update``
and written with a compare-and-swap on ``version``.
"""

import logging
from decimal import Decimal, InvalidOperation

from common.choices import StockOutPolicy, TransactionType
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from .models import InventoryItem, StockTransaction

logger = logging.getLogger("stockroom.inventory")

INITIAL_STOCK_NOTE = "Initial stock via item creation"

# Attributes callers may edit directly; stock only moves through the ledger
EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "sku",
    "min_stock_level",
    "max_stock_level",
    "buy_price",
    "sell_price",
    "supplier",
    "location",
)


class InventoryError(Exception):
    """Base class for ledger failures."""


class InventoryValidationError(InventoryError):
    """Raised with a field -> message map when input breaks a ledger rule."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class ItemNotFoundError(InventoryError):
    pass


class InsufficientStockError(InventoryError):
    pass


class ConcurrentUpdateError(InventoryError):
    """Raised when an item changed between read and write."""


def _as_decimal(value) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _as_int(value) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        as_decimal = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if as_decimal != as_decimal.to_integral_value():
        return None
    return int(as_decimal)


def validate_item_data(data: dict, *, partial: bool = False) -> dict[str, str]:
    """Check item fields and return a field -> message map (empty when valid).

    With ``partial=True`` only the supplied keys are checked, against values
    already merged with the stored record by the caller, and the
    sell-above-buy rule (a creation-time rule) is skipped.
    """
    errors: dict[str, str] = {}

    def supplied(key):
        return not partial or key in data

    for key, label in (("name", "Product name"), ("category", "Category"), ("sku", "SKU")):
        if supplied(key) and not str(data.get(key) or "").strip():
            errors[key] = f"{label} is required"

    buy_price = _as_decimal(data.get("buy_price"))
    sell_price = _as_decimal(data.get("sell_price"))
    if supplied("buy_price") and (buy_price is None or buy_price <= 0):
        errors["buy_price"] = "Buy price must be greater than 0"
    if supplied("sell_price") and (sell_price is None or sell_price <= 0):
        errors["sell_price"] = "Sell price must be greater than 0"
    elif not partial and buy_price is not None and buy_price > 0 and sell_price <= buy_price:
        errors["sell_price"] = "Sell price must be greater than buy price"

    min_level = _as_int(data.get("min_stock_level", 0))
    if supplied("min_stock_level") and (min_level is None or min_level < 0):
        errors["min_stock_level"] = "Minimum stock level must be 0 or greater"

    if not partial:
        current = _as_int(data.get("current_stock", 0))
        if current is None or current < 0:
            errors["current_stock"] = "Current stock must be 0 or greater"

    raw_max = data.get("max_stock_level")
    if supplied("max_stock_level") and raw_max not in (None, ""):
        max_level = _as_int(raw_max)
        if max_level is None or max_level < 0:
            errors["max_stock_level"] = "Maximum stock level must be 0 or greater"
        elif min_level is not None and max_level < min_level:
            errors["max_stock_level"] = "Maximum stock level must be at least the minimum stock level"

    return errors


def validate_transaction_data(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    if data.get("type") not in TransactionType.values:
        errors["type"] = "Transaction type must be one of: " + ", ".join(TransactionType.values)
    quantity = _as_int(data.get("quantity"))
    if quantity is None or quantity <= 0:
        errors["quantity"] = "Quantity must be a whole number greater than 0"
    unit_price = _as_decimal(data.get("unit_price"))
    if unit_price is None or unit_price <= 0:
        errors["unit_price"] = "Unit price must be greater than 0"
    return errors


def stock_out_policy() -> str:
    policy = getattr(settings, "INVENTORY_STOCK_OUT_POLICY", StockOutPolicy.CLAMP)
    return policy if policy in StockOutPolicy.values else StockOutPolicy.CLAMP


def next_stock_level(current: int, txn_type: str, quantity: int, *, policy: str = StockOutPolicy.CLAMP) -> int:
    """Return the stock level after applying one movement of ``txn_type``."""
    if txn_type == TransactionType.STOCK_IN:
        return current + quantity
    if txn_type == TransactionType.STOCK_OUT:
        if quantity > current and policy == StockOutPolicy.REJECT:
            raise InsufficientStockError(f"Insufficient stock: requested {quantity}, available {current}")
        return max(0, current - quantity)
    if txn_type == TransactionType.ADJUSTMENT:
        return quantity
    if txn_type == TransactionType.TRANSFER:
        # Location moves do not change the global quantity
        return current
    raise InventoryValidationError({"type": f"Unknown transaction type: {txn_type}"})


def _swap_stock(*, item_id: str, expected_version: int, new_stock: int, now) -> bool:
    updated = InventoryItem.objects.filter(pk=item_id, version=expected_version).update(
        current_stock=new_stock,
        version=F("version") + 1,
        updated_at=now,
    )
    return updated == 1


def _sku_taken(sku: str, *, exclude_id: str | None = None) -> bool:
    qs = InventoryItem.objects.filter(sku=sku)
    if exclude_id:
        qs = qs.exclude(pk=exclude_id)
    return qs.exists()


@transaction.atomic
def create_item(**data) -> InventoryItem:
    """Create an item, seeding a stock_in transaction for any opening stock."""
    errors = validate_item_data(data)
    if errors:
        raise InventoryValidationError(errors)
    sku = str(data["sku"]).strip()
    if _sku_taken(sku):
        raise InventoryValidationError({"sku": "SKU already exists"})

    now = timezone.now()
    max_level = data.get("max_stock_level")
    try:
        item = InventoryItem.objects.create(
            name=str(data["name"]).strip(),
            description=data.get("description") or "",
            category=str(data["category"]).strip(),
            sku=sku,
            current_stock=_as_int(data.get("current_stock", 0)),
            min_stock_level=_as_int(data.get("min_stock_level", 0)),
            max_stock_level=_as_int(max_level) if max_level not in (None, "") else None,
            buy_price=_as_decimal(data["buy_price"]),
            sell_price=_as_decimal(data["sell_price"]),
            supplier=data.get("supplier") or "",
            location=data.get("location") or "",
            created_at=now,
            updated_at=now,
        )
    except IntegrityError:
        raise InventoryValidationError({"sku": "SKU already exists"})

    if item.current_stock > 0:
        StockTransaction.objects.create(
            item_id=item.id,
            type=TransactionType.STOCK_IN,
            quantity=item.current_stock,
            unit_price=item.buy_price,
            total_amount=item.buy_price * item.current_stock,
            notes=INITIAL_STOCK_NOTE,
            performed_by=data.get("performed_by") or "",
            created_at=now,
        )

    logger.info(
        "inventory.item_created",
        extra={
            "event": "inventory.item_created",
            "item_id": item.id,
            "sku": item.sku,
            "initial_stock": item.current_stock,
        },
    )
    return item


@transaction.atomic
def update_item(*, item_id: str, changes: dict, expected_version: int | None = None) -> InventoryItem:
    """Edit non-stock attributes of an item.

    ``expected_version`` lets callers detect that someone else changed the
    item since they read it.
    """
    try:
        item = InventoryItem.objects.select_for_update().get(pk=item_id)
    except InventoryItem.DoesNotExist:
        raise ItemNotFoundError(f"Item {item_id} not found")

    if expected_version is not None and int(expected_version) != item.version:
        raise ConcurrentUpdateError(f"Item {item_id} was modified (version {item.version})")

    updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
    merged = {field: getattr(item, field) for field in EDITABLE_FIELDS}
    merged.update(updates)
    # Only report problems with what the caller touched; max depends on min
    relevant = set(updates)
    if "min_stock_level" in updates:
        relevant.add("max_stock_level")
    errors = {k: v for k, v in validate_item_data(merged, partial=True).items() if k in relevant}
    if errors:
        raise InventoryValidationError(errors)

    if "sku" in updates:
        updates["sku"] = str(updates["sku"]).strip()
        if _sku_taken(updates["sku"], exclude_id=item.pk):
            raise InventoryValidationError({"sku": "SKU already exists"})
    for key in ("name", "category"):
        if key in updates:
            updates[key] = str(updates[key]).strip()
    for key in ("buy_price", "sell_price"):
        if key in updates:
            updates[key] = _as_decimal(updates[key])
    if "min_stock_level" in updates:
        updates["min_stock_level"] = _as_int(updates["min_stock_level"])
    if "max_stock_level" in updates:
        raw_max = updates["max_stock_level"]
        updates["max_stock_level"] = None if raw_max in (None, "") else _as_int(raw_max)
    for key in ("description", "supplier", "location"):
        if key in updates:
            updates[key] = updates[key] or ""

    for key, value in updates.items():
        setattr(item, key, value)
    item.version += 1
    item.updated_at = timezone.now()
    item.save()

    logger.info(
        "inventory.item_updated",
        extra={"event": "inventory.item_updated", "item_id": item.id, "fields": sorted(updates)},
    )
    return item


@transaction.atomic
def delete_item(*, item_id: str) -> int:
    """Delete an item and its transactions; returns the number of transactions removed."""
    deleted, _ = InventoryItem.objects.filter(pk=item_id).delete()
    if not deleted:
        raise ItemNotFoundError(f"Item {item_id} not found")
    removed, _ = StockTransaction.objects.filter(item_id=item_id).delete()
    logger.info(
        "inventory.item_deleted",
        extra={"event": "inventory.item_deleted", "item_id": item_id, "transactions_removed": removed},
    )
    return removed


@transaction.atomic
def record_transaction(
    *,
    item_id: str,
    txn_type: str,
    quantity,
    unit_price,
    reference: str = "",
    notes: str = "",
    performed_by: str = "",
) -> StockTransaction:
    """Append a stock transaction and apply it to the item's stock.

    The transaction is stored even when the item does not exist; the stock
    update is then skipped. The stored quantity is the requested one, so a
    clamped stock_out still records what was asked for.
    """
    errors = validate_transaction_data({"type": txn_type, "quantity": quantity, "unit_price": unit_price})
    if errors:
        raise InventoryValidationError(errors)
    quantity = _as_int(quantity)
    unit_price = _as_decimal(unit_price)
    now = timezone.now()

    item = InventoryItem.objects.select_for_update().filter(pk=item_id).first()
    new_stock = None
    if item is not None:
        new_stock = next_stock_level(item.current_stock, txn_type, quantity, policy=stock_out_policy())

    txn = StockTransaction.objects.create(
        item_id=item_id,
        type=txn_type,
        quantity=quantity,
        unit_price=unit_price,
        total_amount=unit_price * quantity,
        reference=reference or "",
        notes=notes or "",
        performed_by=performed_by or "",
        created_at=now,
    )

    if item is None:
        logger.warning(
            "inventory.transaction_orphaned",
            extra={"event": "inventory.transaction_orphaned", "transaction_id": txn.id, "item_id": item_id},
        )
        return txn

    if not _swap_stock(item_id=item.pk, expected_version=item.version, new_stock=new_stock, now=now):
        raise ConcurrentUpdateError(f"Item {item_id} changed while recording a transaction")

    logger.info(
        "inventory.transaction_recorded",
        extra={
            "event": "inventory.transaction_recorded",
            "transaction_id": txn.id,
            "item_id": item_id,
            "type": txn_type,
            "quantity": quantity,
            "stock_from": item.current_stock,
            "stock_to": new_stock,
        },
    )
    return txn


@transaction.atomic
def replace_all(*, items: list[InventoryItem], transactions: list[StockTransaction]) -> tuple[int, int]:
    """Destructively replace every item and transaction with the given records."""
    StockTransaction.objects.all().delete()
    InventoryItem.objects.all().delete()
    created_items = InventoryItem.objects.bulk_create(items)
    created_txns = StockTransaction.objects.bulk_create(transactions)
    logger.info(
        "inventory.data_imported",
        extra={"event": "inventory.data_imported", "items": len(created_items), "transactions": len(created_txns)},
    )
    return len(created_items), len(created_txns)


# EOF
