"""Admin registration for cart models."""

from django.contrib import admin, messages

from .models import Cart, CartItem
from .services import clear_cart


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    fields = ("product", "variant", "quantity", "unit_price", "line_total", "updated_at")
    readonly_fields = ("line_total", "updated_at")
    raw_id_fields = ("product",)

    @admin.display(description="Line total")
    def line_total(self, obj):
        return obj.line_total


class OwnerTypeFilter(admin.SimpleListFilter):
    title = "owner type"
    parameter_name = "owner_type"

    def lookups(self, request, model_admin):
        return (("user", "User carts"), ("guest", "Guest carts"))

    def queryset(self, request, queryset):
        if self.value() == "user":
            return queryset.filter(user__isnull=False)
        if self.value() == "guest":
            return queryset.filter(user__isnull=True)
        return queryset


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ("id", "owner", "total_items", "subtotal", "coupon_code", "coupon_discount", "updated_at")
    list_filter = (OwnerTypeFilter,)
    search_fields = ("session_id", "user__username", "user__email", "coupon_code")
    ordering = ("-updated_at",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [CartItemInline]
    list_select_related = ("user",)
    actions = ["action_clear_cart"]

    @admin.display(description="Owner")
    def owner(self, obj):
        return obj.user.display_name if obj.user_id else f"guest:{obj.session_id}"

    @admin.display(description="Items")
    def total_items(self, obj):
        return obj.total_items

    @admin.display(description="Subtotal")
    def subtotal(self, obj):
        return obj.subtotal

    @admin.action(description="Clear cart (items and coupon)")
    def action_clear_cart(self, request, queryset):
        for cart in queryset:
            clear_cart(cart=cart)
        messages.success(request, f"Cleared {queryset.count()} cart(s).")
