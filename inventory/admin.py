"""Admin registrations for inventory app.

The ledger is append-only; the admin exposes it read-only.
"""

from django.contrib import admin

from .models import InventoryLog


@admin.register(InventoryLog)
class InventoryLogAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "product",
        "type",
        "quantity",
        "previous_stock",
        "new_stock",
        "reference_type",
        "reference_id",
        "created_at",
    )
    list_filter = ("type", "reference_type")
    search_fields = ("product__title", "product__sku", "reference_id", "reason")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# EOF
