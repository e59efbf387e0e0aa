"""Serializers for the inventory domain.

Read serializers render items and ledger entries. Write serializers only
coerce payload types; business rules live in ``inventory.services`` so the
API and management commands enforce the same ones. Transfer serializers
describe the export/import document.
"""

from common.choices import TransactionType
from rest_framework import serializers

from .models import InventoryItem, StockTransaction


class InventoryItemSerializer(serializers.ModelSerializer):
    """Read-only item representation with derived stock status and value."""

    stock_status = serializers.CharField(read_only=True)
    stock_value = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "name",
            "description",
            "category",
            "sku",
            "current_stock",
            "min_stock_level",
            "max_stock_level",
            "buy_price",
            "sell_price",
            "supplier",
            "location",
            "stock_status",
            "stock_value",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InventoryItemWriteSerializer(serializers.Serializer):
    """Payload for creating or editing an item.

    Every field is optional here so missing values reach the ledger's
    validation and come back as a single field -> message map.
    """

    name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.CharField(required=False, allow_blank=True, max_length=100)
    sku = serializers.CharField(required=False, allow_blank=True, max_length=64)
    current_stock = serializers.IntegerField(required=False)
    min_stock_level = serializers.IntegerField(required=False)
    max_stock_level = serializers.IntegerField(required=False, allow_null=True)
    buy_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    sell_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    supplier = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=200)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=200)
    version = serializers.IntegerField(required=False, min_value=0)


class StockTransactionSerializer(serializers.ModelSerializer):
    """Read-only ledger entry.

    When the view passes an ``items`` lookup in the context, the entry is
    enriched with the item's name and SKU (``None`` for orphans).
    """

    item_name = serializers.SerializerMethodField()
    item_sku = serializers.SerializerMethodField()

    class Meta:
        model = StockTransaction
        fields = [
            "id",
            "item_id",
            "item_name",
            "item_sku",
            "type",
            "quantity",
            "unit_price",
            "total_amount",
            "reference",
            "notes",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields

    def _item(self, obj):
        return self.context.get("items", {}).get(obj.item_id)

    def get_item_name(self, obj) -> str | None:
        item = self._item(obj)
        return item.name if item else None

    def get_item_sku(self, obj) -> str | None:
        item = self._item(obj)
        return item.sku if item else None


class StockTransactionCreateSerializer(serializers.Serializer):
    item_id = serializers.CharField(max_length=64)
    type = serializers.CharField(max_length=16)
    quantity = serializers.IntegerField(required=False, allow_null=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    reference = serializers.CharField(required=False, allow_blank=True, max_length=120)
    notes = serializers.CharField(required=False, allow_blank=True)


class InventoryItemTransferSerializer(serializers.ModelSerializer):
    """Item as it appears in an export document; ids and timestamps are kept."""

    id = serializers.CharField(max_length=64, required=False)
    created_at = serializers.DateTimeField(required=False)
    updated_at = serializers.DateTimeField(required=False)

    class Meta:
        model = InventoryItem
        fields = [
            "id",
            "name",
            "description",
            "category",
            "sku",
            "current_stock",
            "min_stock_level",
            "max_stock_level",
            "buy_price",
            "sell_price",
            "supplier",
            "location",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {
            # Import replaces the whole table, so uniqueness is checked
            # within the document instead of against current rows.
            "sku": {"validators": []},
            "current_stock": {"min_value": 0},
            "min_stock_level": {"min_value": 0},
            "max_stock_level": {"min_value": 0},
        }


class StockTransactionTransferSerializer(serializers.ModelSerializer):
    id = serializers.CharField(max_length=64, required=False)
    type = serializers.ChoiceField(choices=TransactionType.choices)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False)
    created_at = serializers.DateTimeField(required=False)

    class Meta:
        model = StockTransaction
        fields = [
            "id",
            "item_id",
            "type",
            "quantity",
            "unit_price",
            "total_amount",
            "reference",
            "notes",
            "performed_by",
            "created_at",
        ]
        extra_kwargs = {
            "quantity": {"min_value": 0},
            "unit_price": {"min_value": 0},
        }


# EOF
