from django.contrib import admin, messages

from .models import Review
from .services import approve_review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "user", "rating", "is_verified_purchase", "is_approved", "created_at")
    list_filter = ("is_approved", "is_verified_purchase", "rating")
    search_fields = ("title", "product__title", "user__email")
    raw_id_fields = ("product", "user", "order")
    readonly_fields = ("helpful_count", "created_at", "updated_at")
    list_select_related = ("product", "user")
    actions = ["action_approve"]

    @admin.action(description="Approve selected reviews")
    def action_approve(self, request, queryset):
        pending = list(queryset.filter(is_approved=False))
        for review in pending:
            approve_review(review)
        messages.success(request, f"Approved {len(pending)} review(s).")
