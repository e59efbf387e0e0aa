"""Django app configuration for analytics."""

from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    """Financial reports computed from the stock ledger."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "analytics"
