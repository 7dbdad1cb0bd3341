"""Cart serializers for read and write operations."""

from rest_framework import serializers

from .models import Cart, CartItem


class CartItemReadSerializer(serializers.ModelSerializer):
    """Read serializer for a cart item."""

    product_id = serializers.IntegerField(source="product.id", read_only=True)
    title = serializers.CharField(source="product.title", read_only=True)
    image = serializers.CharField(source="product.primary_image", read_only=True, allow_null=True)
    stock = serializers.IntegerField(source="product.stock", read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "title",
            "image",
            "variant",
            "quantity",
            "unit_price",
            "line_total",
            "stock",
        ]


class CartReadSerializer(serializers.ModelSerializer):
    """Read serializer for the cart summary and items."""

    items = CartItemReadSerializer(many=True, read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    total_items = serializers.IntegerField(read_only=True)

    class Meta:
        model = Cart
        fields = ["id", "items", "total_items", "subtotal", "coupon_code", "coupon_discount", "total", "updated_at"]


class AddItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, default=1)
    variant = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class UpdateItemQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class ApplyCouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=40)
