from django.contrib import admin

from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ("code", "type", "value", "used_count", "usage_limit", "valid_until", "is_active")
    list_filter = ("type", "is_active")
    search_fields = ("code", "description")
    readonly_fields = ("used_count", "created_at", "updated_at")
