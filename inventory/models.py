"""Inventory models: stocked items and the append-only stock ledger.

Items and transactions use opaque string ids so exported data can be
re-imported with its ids intact. Transactions reference items by id only;
a transaction whose item was deleted stays in the table as an orphan.
"""

import uuid
from decimal import Decimal

from common.choices import StockStatus, TransactionType
from django.db import models
from django.utils import timezone


def new_record_id() -> str:
    return uuid.uuid4().hex


class ImmutableRecordError(Exception):
    """Raised when code tries to modify a persisted ledger entry."""


class InventoryItem(models.Model):
    id = models.CharField(primary_key=True, max_length=64, default=new_record_id, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, db_index=True)
    sku = models.CharField(max_length=64, unique=True)
    current_stock = models.IntegerField(default=0)
    min_stock_level = models.IntegerField(default=0)
    max_stock_level = models.IntegerField(null=True, blank=True)
    buy_price = models.DecimalField(max_digits=12, decimal_places=2)
    sell_price = models.DecimalField(max_digits=12, decimal_places=2)
    supplier = models.CharField(max_length=200, blank=True)
    location = models.CharField(max_length=200, blank=True)
    # Bumped on every write; stock updates compare-and-swap on it
    version = models.PositiveIntegerField(default=0)
    # Set explicitly (not auto_now) so imports can carry their own timestamps
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["name", "id"]
        constraints = [
            models.CheckConstraint(name="item_stock_non_negative", condition=models.Q(current_stock__gte=0)),
            models.CheckConstraint(name="item_min_level_non_negative", condition=models.Q(min_stock_level__gte=0)),
            models.CheckConstraint(
                name="item_max_level_non_negative",
                condition=models.Q(max_stock_level__isnull=True) | models.Q(max_stock_level__gte=0),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.sku} {self.name} stock={self.current_stock}"

    @property
    def stock_status(self) -> str:
        if self.current_stock <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.current_stock <= self.min_stock_level:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    @property
    def stock_value(self) -> Decimal:
        return Decimal(int(self.current_stock)) * (self.buy_price or Decimal("0.00"))


class StockTransaction(models.Model):
    TYPE_STOCK_IN = TransactionType.STOCK_IN
    TYPE_STOCK_OUT = TransactionType.STOCK_OUT
    TYPE_ADJUSTMENT = TransactionType.ADJUSTMENT
    TYPE_TRANSFER = TransactionType.TRANSFER
    TYPE_CHOICES = TransactionType.choices

    id = models.CharField(primary_key=True, max_length=64, default=new_record_id, editable=False)
    item_id = models.CharField(max_length=64, db_index=True)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, db_index=True)
    quantity = models.IntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    reference = models.CharField(max_length=120, blank=True)
    notes = models.TextField(blank=True)
    performed_by = models.CharField(max_length=150, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at", "id"]
        constraints = [
            models.CheckConstraint(name="txn_quantity_non_negative", condition=models.Q(quantity__gte=0)),
            models.CheckConstraint(name="txn_unit_price_non_negative", condition=models.Q(unit_price__gte=0)),
        ]
        indexes = [
            models.Index(fields=["item_id", "created_at"], name="inv_txn_item_created_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.type} {self.quantity} of {self.item_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError("Stock transactions cannot be modified once recorded")
        super().save(*args, **kwargs)


# EOF
