"""Serializers for the inventory admin API."""

from catalog.models import Product
from common.choices import LogType
from rest_framework import serializers

from .models import InventoryLog


class InventoryProductSerializer(serializers.ModelSerializer):
    """Stock view of a product, exposing derived stock flags."""

    in_stock = serializers.BooleanField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = ["id", "title", "slug", "sku", "stock", "low_stock_threshold", "in_stock", "is_low_stock"]
        read_only_fields = fields


class InventoryLogSerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source="product.title", read_only=True)
    performed_by = serializers.CharField(source="performed_by.email", read_only=True, allow_null=True, default=None)

    class Meta:
        model = InventoryLog
        fields = [
            "id",
            "product",
            "product_title",
            "type",
            "quantity",
            "previous_stock",
            "new_stock",
            "reason",
            "reference_type",
            "reference_id",
            "performed_by",
            "created_at",
        ]
        read_only_fields = fields


class InventoryStatsSerializer(serializers.Serializer):
    total_products = serializers.IntegerField()
    total_stock = serializers.IntegerField()
    low_stock_count = serializers.IntegerField()
    out_of_stock_count = serializers.IntegerField()


class StockAdjustmentSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=LogType.choices)
    quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255)

    def validate(self, attrs):
        if attrs["type"] in (LogType.IN, LogType.OUT) and attrs["quantity"] == 0:
            raise serializers.ValidationError({"quantity": "Must be positive for in/out adjustments."})
        return attrs


class StockAdjustmentResultSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    previous_stock = serializers.IntegerField()
    new_stock = serializers.IntegerField()
    adjustment = serializers.IntegerField()


class BulkStockRowSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    stock = serializers.IntegerField(min_value=0)


class BulkStockUpdateSerializer(serializers.Serializer):
    updates = BulkStockRowSerializer(many=True, allow_empty=False)


# EOF
