"""Django app configuration for the Cart app."""

from django.apps import AppConfig


class CartConfig(AppConfig):
    """Shopping carts for signed-in users and guest sessions."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "cart"
    verbose_name = "Shopping carts"
