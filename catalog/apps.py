"""Django app configuration for catalog."""

from django.apps import AppConfig


class CatalogConfig(AppConfig):
    """Products, categories and product imagery."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"
    verbose_name = "Catalog"
