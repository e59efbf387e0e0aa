"""Read-only serializers for analytics reports.

They render the dataclasses from ``analytics.calculations``; money is
rendered as two-decimal strings like the rest of the API.
"""

from inventory.serializers import InventoryItemSerializer
from rest_framework import serializers


def _money(**kwargs):
    return serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True, **kwargs)


class InventoryStatsSerializer(serializers.Serializer):
    total_items = serializers.IntegerField(read_only=True)
    total_value = _money()
    low_stock_count = serializers.IntegerField(read_only=True)
    out_of_stock_count = serializers.IntegerField(read_only=True)
    total_profit = _money()
    total_loss = _money()
    monthly_profit = _money()
    monthly_loss = _money()


class DaySummarySerializer(serializers.Serializer):
    date = serializers.CharField(read_only=True)
    total_transactions_count = serializers.IntegerField(read_only=True)
    total_money_in = _money()
    total_money_out = _money()
    net_flow = _money()
    gross_profit_from_sales = _money()
    loss_from_below_cost_sales = _money()


class DailySummaryReportSerializer(serializers.Serializer):
    range = serializers.CharField(read_only=True)
    days = DaySummarySerializer(many=True, read_only=True)
    summary = DaySummarySerializer(read_only=True, allow_null=True)


class TrendPointSerializer(serializers.Serializer):
    date = serializers.CharField(read_only=True)
    profit = _money()
    revenue = _money()


class CategoryBreakdownSerializer(serializers.Serializer):
    category = serializers.CharField(read_only=True)
    value = _money()
    items = serializers.IntegerField(read_only=True)
    percentage = _money()


class TopPerformerSerializer(serializers.Serializer):
    item = InventoryItemSerializer(read_only=True)
    profit = _money()
    revenue = _money()
    units_sold = serializers.IntegerField(read_only=True)


class StockAlertsSerializer(serializers.Serializer):
    critical = InventoryItemSerializer(many=True, read_only=True)
    warning = InventoryItemSerializer(many=True, read_only=True)
    overstock = InventoryItemSerializer(many=True, read_only=True)


class TransactionSummarySerializer(serializers.Serializer):
    total_transactions = serializers.IntegerField(read_only=True)
    total_purchase_value = _money()
    total_sale_value = _money()
    total_adjustments = serializers.IntegerField(read_only=True)
    net_cash_flow = _money()
    gross_profit = _money()
    period_start = serializers.DateTimeField(read_only=True, allow_null=True)
    period_end = serializers.DateTimeField(read_only=True, allow_null=True)


# EOF
