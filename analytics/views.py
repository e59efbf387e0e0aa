"""Analytics API.

Every report is computed on request from a fresh snapshot of the ledger.
"""

from common.choices import SummaryRange
from drf_spectacular.utils import OpenApiParameter, extend_schema
from inventory.filters import StockTransactionFilter
from inventory.models import InventoryItem, StockTransaction
from inventory.selectors import item_lookup
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import calculations, services
from .serializers import (
    CategoryBreakdownSerializer,
    DailySummaryReportSerializer,
    InventoryStatsSerializer,
    StockAlertsSerializer,
    TopPerformerSerializer,
    TransactionSummarySerializer,
    TrendPointSerializer,
)


def _int_param(request, name: str, default: int, lo: int, hi: int) -> int:
    try:
        value = int(request.query_params.get(name, default))
    except (TypeError, ValueError):
        value = default
    return min(max(value, lo), hi)


class AnalyticsView(APIView):
    throttle_scope = "analytics"


class StatsView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Inventory statistics",
        description=(
            "Item counts, stock value, and profit/loss from sales. Profit compares each sale with the "
            "item's current buy price; monthly figures cover the current calendar month."
        ),
        responses={200: InventoryStatsSerializer},
    )
    def get(self, request):
        return Response(InventoryStatsSerializer(services.inventory_stats()).data)


class DailySummariesView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Daily summaries",
        description=(
            "Per-day transaction totals, newest first. `today` returns one summary; `week`, `month` and "
            "`quarter` also return a summary over the whole window; `all` returns every day."
        ),
        parameters=[
            OpenApiParameter(
                name="range", required=False, type=str, enum=SummaryRange.values, description="Window (default all)"
            )
        ],
        responses={200: DailySummaryReportSerializer},
    )
    def get(self, request):
        range_name = request.query_params.get("range", SummaryRange.ALL)
        report = services.daily_summaries(range_name)
        return Response(DailySummaryReportSerializer(report).data)


class ProfitTrendView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Profit trend",
        parameters=[OpenApiParameter(name="days", required=False, type=int, description="1-365, default 30")],
        responses={200: TrendPointSerializer(many=True)},
    )
    def get(self, request):
        days = _int_param(request, "days", 30, 1, 365)
        return Response(TrendPointSerializer(services.profit_trend(days=days), many=True).data)


class CategoryBreakdownView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Stock value by category",
        responses={200: CategoryBreakdownSerializer(many=True)},
    )
    def get(self, request):
        rows = calculations.category_breakdown(InventoryItem.objects.all())
        return Response(CategoryBreakdownSerializer(rows, many=True).data)


class TopPerformersView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Top performing items",
        parameters=[OpenApiParameter(name="limit", required=False, type=int, description="1-100, default 10")],
        responses={200: TopPerformerSerializer(many=True)},
    )
    def get(self, request):
        limit = _int_param(request, "limit", 10, 1, 100)
        return Response(TopPerformerSerializer(services.top_performers(limit=limit), many=True).data)


class StockAlertsView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Stock alerts",
        description="critical: out of stock; warning: at or below minimum; overstock: above maximum.",
        responses={200: StockAlertsSerializer},
    )
    def get(self, request):
        alerts = calculations.stock_alerts(InventoryItem.objects.all())
        return Response(StockAlertsSerializer(alerts).data)


class TransactionSummaryView(AnalyticsView):
    @extend_schema(
        tags=["Analytics Endpoints"],
        summary="Transaction summary",
        description="Totals over the transactions matching the same filters as the transaction list.",
        parameters=[
            OpenApiParameter(name="type", required=False, type=str),
            OpenApiParameter(name="item", required=False, type=str),
            OpenApiParameter(name="created_after", required=False, type=str),
            OpenApiParameter(name="created_before", required=False, type=str),
            OpenApiParameter(name="min_amount", required=False, type=float),
            OpenApiParameter(name="max_amount", required=False, type=float),
            OpenApiParameter(name="reference", required=False, type=str),
        ],
        responses={200: TransactionSummarySerializer},
    )
    def get(self, request):
        filterset = StockTransactionFilter(request.query_params, queryset=StockTransaction.objects.all())
        if not filterset.is_valid():
            return Response({"errors": filterset.errors}, status=status.HTTP_400_BAD_REQUEST)
        transactions = list(filterset.qs)
        items = item_lookup(t.item_id for t in transactions).values()
        summary = calculations.summarize_transactions(items, transactions)
        return Response(TransactionSummarySerializer(summary).data)


# EOF
