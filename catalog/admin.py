"""Django admin registrations for the catalog app."""

from django.contrib import admin

from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "slug", "parent", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "sku", "status", "price", "stock", "low_stock_threshold", "is_featured")
    list_filter = ("status", "is_featured", "categories")
    search_fields = ("title", "slug", "sku")
    prepopulated_fields = {"slug": ("title",)}
    filter_horizontal = ("categories",)
    # Stock changes must go through inventory adjustments to keep the ledger whole
    readonly_fields = ("stock", "created_at", "updated_at")
