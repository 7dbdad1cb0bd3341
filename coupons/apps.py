"""Django app configuration for the Coupons app."""

from django.apps import AppConfig


class CouponsConfig(AppConfig):
    """AppConfig for discount coupons."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "coupons"
