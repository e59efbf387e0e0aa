"""Inventory API: items, the stock ledger, and export/import.

All endpoints require a staff user (project default permission).
"""

from django.conf import settings
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import SAFE_METHODS
from rest_framework.response import Response
from rest_framework.views import APIView

from .filters import InventoryItemFilter, StockTransactionFilter
from .models import InventoryItem, StockTransaction
from .selectors import item_lookup, recent_transactions, transactions_for_item
from .serializers import (
    InventoryItemSerializer,
    InventoryItemWriteSerializer,
    StockTransactionCreateSerializer,
    StockTransactionSerializer,
)
from .services import (
    ConcurrentUpdateError,
    InsufficientStockError,
    InventoryError,
    InventoryValidationError,
    ItemNotFoundError,
    create_item,
    delete_item,
    record_transaction,
    update_item,
)
from .transfer import export_payload, import_payload


def ledger_error_response(exc: InventoryError) -> Response:
    if isinstance(exc, InventoryValidationError):
        return Response({"errors": exc.errors}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, ItemNotFoundError):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, (ConcurrentUpdateError, InsufficientStockError)):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
    raise exc


def _performed_by(request) -> str:
    user = getattr(request, "user", None)
    return (getattr(user, "email", "") or getattr(user, "username", "")) if user else ""


class ScopedByMethodMixin:
    """Use the read scope for safe methods and the write scope otherwise."""

    read_scope = "inventory"
    write_scope = "inventory_write"

    def get_throttles(self):
        self.throttle_scope = self.read_scope if self.request.method in SAFE_METHODS else self.write_scope
        return super().get_throttles()


@extend_schema_view(
    list=extend_schema(
        tags=["Inventory Endpoints"],
        summary="List items",
        description="Filters: category, status (in_stock/low_stock/out_of_stock), search, supplier, location.",
    ),
    retrieve=extend_schema(tags=["Inventory Endpoints"], summary="Get item"),
    create=extend_schema(
        tags=["Inventory Endpoints"],
        summary="Create item",
        description="Creates an item. Opening stock is recorded as a stock_in transaction at the buy price.",
        request=InventoryItemWriteSerializer,
        responses={201: InventoryItemSerializer},
        examples=[
            OpenApiExample(
                "New item",
                value={
                    "name": "Espresso beans 1kg",
                    "category": "Coffee",
                    "sku": "COF-ESP-1KG",
                    "current_stock": 20,
                    "min_stock_level": 5,
                    "buy_price": "10.00",
                    "sell_price": "15.00",
                },
                request_only=True,
            ),
            OpenApiExample(
                "Validation error",
                value={"errors": {"sell_price": "Sell price must be greater than buy price"}},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    ),
    update=extend_schema(
        tags=["Inventory Endpoints"],
        summary="Update item",
        description=(
            "Edits non-stock attributes. PUT and PATCH both merge the supplied fields into the item; "
            "omitted fields keep their values. Send `version` to reject the edit if the item changed meanwhile."
        ),
        request=InventoryItemWriteSerializer,
    ),
    partial_update=extend_schema(
        tags=["Inventory Endpoints"],
        summary="Partial update item",
        description="Same as update: only the supplied fields change.",
        request=InventoryItemWriteSerializer,
    ),
    destroy=extend_schema(
        tags=["Inventory Endpoints"], summary="Delete item", description="Also deletes the item's transactions."
    ),
)
class InventoryItemViewSet(ScopedByMethodMixin, viewsets.ModelViewSet):
    queryset = InventoryItem.objects.all()
    serializer_class = InventoryItemSerializer
    filterset_class = InventoryItemFilter
    ordering_fields = ["name", "sku", "category", "current_stock", "updated_at", "created_at"]
    ordering = ["name", "id"]

    def create(self, request, *args, **kwargs):
        payload = InventoryItemWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = dict(payload.validated_data)
        data.pop("version", None)
        try:
            item = create_item(**data, performed_by=_performed_by(request))
        except InventoryError as exc:
            return ledger_error_response(exc)
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        # Every write field is optional, so PUT merges like PATCH
        payload = InventoryItemWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        changes = dict(payload.validated_data)
        expected_version = changes.pop("version", None)
        try:
            item = update_item(item_id=self.kwargs["pk"], changes=changes, expected_version=expected_version)
        except InventoryError as exc:
            return ledger_error_response(exc)
        return Response(InventoryItemSerializer(item).data)

    def destroy(self, request, *args, **kwargs):
        try:
            delete_item(item_id=self.kwargs["pk"])
        except InventoryError as exc:
            return ledger_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Item transaction history",
        responses={200: StockTransactionSerializer(many=True)},
    )
    @action(detail=True, methods=["get"])
    def transactions(self, request, pk=None):
        item = self.get_object()
        page = self.paginate_queryset(transactions_for_item(item.id))
        serializer = StockTransactionSerializer(page, many=True, context={"items": {item.id: item}})
        return self.get_paginated_response(serializer.data)


@extend_schema_view(
    list=extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock transactions",
        description=(
            "Newest first. Filters: type, item, created_after / created_before (ISO), "
            "min_amount / max_amount, reference (matches reference or notes)."
        ),
    ),
    retrieve=extend_schema(tags=["Inventory Endpoints"], summary="Get stock transaction"),
    create=extend_schema(
        tags=["Inventory Endpoints"],
        summary="Record stock transaction",
        description=(
            "Appends a ledger entry and applies it: stock_in adds, stock_out subtracts "
            "(clamped at 0 unless the reject policy is configured), adjustment sets the level, "
            "transfer leaves it unchanged. Entries for unknown items are stored without a stock change."
        ),
        request=StockTransactionCreateSerializer,
        responses={201: StockTransactionSerializer},
        examples=[
            OpenApiExample(
                "Sale",
                value={"item_id": "6f1c...", "type": "stock_out", "quantity": 5, "unit_price": "15.00"},
                request_only=True,
            )
        ],
    ),
)
class StockTransactionViewSet(
    ScopedByMethodMixin,
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = StockTransaction.objects.all().order_by("-created_at", "id")
    serializer_class = StockTransactionSerializer
    filterset_class = StockTransactionFilter
    ordering_fields = ["created_at", "total_amount", "quantity"]

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        rows = page if page is not None else list(queryset)
        context = {**self.get_serializer_context(), "items": item_lookup(t.item_id for t in rows)}
        serializer = StockTransactionSerializer(rows, many=True, context=context)
        if page is not None:
            return self.get_paginated_response(serializer.data)
        return Response(serializer.data)

    def retrieve(self, request, *args, **kwargs):
        txn = self.get_object()
        serializer = StockTransactionSerializer(txn, context={"items": item_lookup([txn.item_id])})
        return Response(serializer.data)

    def create(self, request, *args, **kwargs):
        payload = StockTransactionCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        try:
            txn = record_transaction(
                item_id=data["item_id"],
                txn_type=data["type"],
                quantity=data.get("quantity"),
                unit_price=data.get("unit_price"),
                reference=data.get("reference", ""),
                notes=data.get("notes", ""),
                performed_by=_performed_by(request),
            )
        except InventoryError as exc:
            return ledger_error_response(exc)
        serializer = StockTransactionSerializer(txn, context={"items": item_lookup([txn.item_id])})
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Recent stock transactions",
        parameters=[OpenApiParameter(name="limit", description="Number of entries", required=False, type=int)],
        responses={200: StockTransactionSerializer(many=True)},
    )
    @action(detail=False, methods=["get"])
    def recent(self, request):
        default = getattr(settings, "INVENTORY_RECENT_TRANSACTIONS_LIMIT", 10)
        try:
            limit = int(request.query_params.get("limit", default))
        except (TypeError, ValueError):
            limit = default
        rows = recent_transactions(limit=min(max(limit, 1), 100))
        serializer = StockTransactionSerializer(rows, many=True, context={"items": item_lookup(t.item_id for t in rows)})
        return Response(serializer.data)


class InventoryExportView(APIView):
    throttle_scope = "data_transfer"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Export inventory",
        description="Returns every item and transaction as one JSON document.",
        examples=[
            OpenApiExample(
                "Export",
                value={"inventory": [], "transactions": [], "export_date": "2025-01-01T12:00:00+00:00"},
                response_only=True,
            )
        ],
    )
    def get(self, request):
        return Response(export_payload())


class InventoryImportView(APIView):
    throttle_scope = "data_transfer"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Import inventory",
        description=(
            "Replaces all items and transactions with the supplied document. "
            "Existing records are deleted; supplied ids are kept."
        ),
        request={"application/json": {"type": "object"}},
        examples=[
            OpenApiExample("Clear everything", value={"inventory": [], "transactions": []}, request_only=True),
            OpenApiExample("Imported", value={"inventory": 0, "transactions": 0}, response_only=True),
        ],
    )
    def post(self, request):
        try:
            items, transactions = import_payload(request.data)
        except InventoryError as exc:
            return ledger_error_response(exc)
        return Response({"inventory": items, "transactions": transactions})


# EOF
