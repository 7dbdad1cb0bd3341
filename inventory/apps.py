from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Stock ledger and admin adjustments."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "inventory"
    verbose_name = "Inventory"
