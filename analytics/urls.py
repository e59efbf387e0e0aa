from django.urls import path

from .views import (
    CategoryBreakdownView,
    DailySummariesView,
    ProfitTrendView,
    StatsView,
    StockAlertsView,
    TopPerformersView,
    TransactionSummaryView,
)

urlpatterns = [
    path("stats/", StatsView.as_view(), name="analytics-stats"),
    path("daily-summaries/", DailySummariesView.as_view(), name="analytics-daily-summaries"),
    path("profit-trend/", ProfitTrendView.as_view(), name="analytics-profit-trend"),
    path("categories/", CategoryBreakdownView.as_view(), name="analytics-categories"),
    path("top-performers/", TopPerformersView.as_view(), name="analytics-top-performers"),
    path("stock-alerts/", StockAlertsView.as_view(), name="analytics-stock-alerts"),
    path("transaction-summary/", TransactionSummaryView.as_view(), name="analytics-transaction-summary"),
]

# EOF
