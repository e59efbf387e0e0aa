"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import InventoryItem, StockTransaction


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "category", "current_stock", "min_stock_level", "sell_price", "updated_at")
    list_filter = ("category",)
    search_fields = ("sku", "name", "supplier")
    # Stock only moves through recorded transactions
    readonly_fields = ("id", "current_stock", "version", "created_at", "updated_at")


@admin.register(StockTransaction)
class StockTransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "item_id", "type", "quantity", "unit_price", "total_amount", "reference", "created_at")
    list_filter = ("type",)
    search_fields = ("item_id", "reference", "notes")

    def has_change_permission(self, request, obj=None):
        return False


# EOF
