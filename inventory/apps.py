"""Django app configuration for the inventory app."""

from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Items, the stock ledger and export/import."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
