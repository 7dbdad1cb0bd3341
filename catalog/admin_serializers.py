"""Admin serializers for write endpoints in the catalog app.

Stock is read-only here: on-hand quantity changes go through the inventory
endpoints so that every change lands in the ledger. A product may be created
with `initial_stock`, which is recorded as a restock entry.
"""

from common.choices import LogType, ReferenceType
from django.db import transaction
from inventory.services import adjust_stock
from rest_framework import serializers

from .models import Category, Product


class CategoryAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "parent",
            "is_active",
            "sort_order",
        ]


class ProductAdminSerializer(serializers.ModelSerializer):
    categories = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all(), many=True, required=False)
    initial_stock = serializers.IntegerField(min_value=0, write_only=True, required=False, default=0)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "slug",
            "sku",
            "description",
            "short_description",
            "brand",
            "status",
            "price",
            "compare_at_price",
            "stock",
            "initial_stock",
            "low_stock_threshold",
            "is_low_stock",
            "images",
            "tags",
            "is_featured",
            "categories",
        ]
        read_only_fields = ["id", "stock", "images"]

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        return value

    def create(self, validated_data):
        initial_stock = validated_data.pop("initial_stock", 0)
        with transaction.atomic():
            product = super().create(validated_data)
            if initial_stock:
                request = self.context.get("request")
                adjust_stock(
                    product_id=product.id,
                    delta=initial_stock,
                    log_type=LogType.IN,
                    reason="Initial stock",
                    reference_type=ReferenceType.RESTOCK,
                    performed_by=getattr(request, "user", None),
                )
                product.refresh_from_db(fields=["stock"])
        return product

    def update(self, instance, validated_data):
        validated_data.pop("initial_stock", None)
        return super().update(instance, validated_data)


class ProductImageUploadSerializer(serializers.Serializer):
    image = serializers.ImageField()


class ProductImageDeleteSerializer(serializers.Serializer):
    url = serializers.CharField(max_length=500)
