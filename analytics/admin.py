"""Admin registrations for analytics app."""

from django.contrib import admin

from .models import DailySummary


@admin.register(DailySummary)
class DailySummaryAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "total_transactions_count",
        "total_money_in",
        "total_money_out",
        "net_flow",
        "gross_profit_from_sales",
        "loss_from_below_cost_sales",
        "updated_at",
    )
    date_hierarchy = "date"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


# EOF
