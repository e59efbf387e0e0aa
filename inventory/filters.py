"""django-filter filtersets for inventory list endpoints."""

import django_filters
from common.choices import StockStatus, TransactionType
from django.db.models import F, Q

from .models import InventoryItem, StockTransaction


class InventoryItemFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")
    status = django_filters.ChoiceFilter(choices=StockStatus.choices, method="filter_status")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = InventoryItem
        fields = ["category", "supplier", "location"]

    def filter_status(self, queryset, name, value):
        if value == StockStatus.OUT_OF_STOCK:
            return queryset.filter(current_stock__lte=0)
        if value == StockStatus.LOW_STOCK:
            return queryset.filter(current_stock__gt=0, current_stock__lte=F("min_stock_level"))
        return queryset.filter(current_stock__gt=F("min_stock_level"))

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(name__icontains=value) | Q(sku__icontains=value) | Q(description__icontains=value))


class StockTransactionFilter(django_filters.FilterSet):
    """Transaction list filters.

    ``reference`` matches case-insensitively against both the reference and
    the notes text.
    """

    type = django_filters.ChoiceFilter(choices=TransactionType.choices)
    item = django_filters.CharFilter(field_name="item_id")
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")
    min_amount = django_filters.NumberFilter(field_name="total_amount", lookup_expr="gte")
    max_amount = django_filters.NumberFilter(field_name="total_amount", lookup_expr="lte")
    reference = django_filters.CharFilter(method="filter_reference")

    class Meta:
        model = StockTransaction
        fields = ["type", "item", "created_after", "created_before", "min_amount", "max_amount", "reference"]

    def filter_reference(self, queryset, name, value):
        return queryset.filter(Q(reference__icontains=value) | Q(notes__icontains=value))


# EOF
