"""Django app configuration for the users app."""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Register the account app; its primary keys are UUIDs set on the model."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"
    verbose_name = "Accounts"
