"""Django app configuration for the users app."""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Staff accounts and JWT authentication."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
