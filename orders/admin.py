from django.contrib import admin

from .models import IdempotencyKey, Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "name", "image", "variant", "quantity", "unit_price", "line_total")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Read-mostly view; status changes go through the API so stock moves with them."""

    list_display = ("id", "number", "status", "payment_status", "user", "email", "total", "created_at")
    list_filter = ("status", "payment_status", "created_at")
    search_fields = ("number", "email", "payment_intent_id", "tracking_number")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]
    readonly_fields = (
        "user",
        "number",
        "email",
        "status",
        "payment_status",
        "subtotal",
        "shipping_cost",
        "tax",
        "discount",
        "total",
        "currency",
        "shipping_address",
        "billing_address",
        "coupon_code",
        "payment_intent_id",
        "payment_method",
        "paid_at",
        "confirmed_at",
        "cancelled_at",
    )


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "scope", "path", "method", "response_code", "created_at")
    list_filter = ("method", "response_code", "created_at")
    search_fields = ("key", "scope", "path")
    date_hierarchy = "created_at"
