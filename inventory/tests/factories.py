from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from inventory.models import InventoryItem, StockTransaction


class InventoryItemFactory(DjangoModelFactory):
    class Meta:
        model = InventoryItem

    name = factory.Sequence(lambda n: f"Item {n}")
    category = "General"
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    current_stock = 10
    min_stock_level = 2
    buy_price = Decimal("10.00")
    sell_price = Decimal("15.00")


class StockTransactionFactory(DjangoModelFactory):
    class Meta:
        model = StockTransaction

    item_id = factory.LazyAttribute(lambda o: InventoryItemFactory().id)
    type = StockTransaction.TYPE_STOCK_IN
    quantity = 1
    unit_price = Decimal("10.00")
    total_amount = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)
