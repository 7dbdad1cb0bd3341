"""DRF serializers for Orders.

Orders are snapshots, so every money field is read straight from the stored
columns; nothing is recomputed on read.
"""

from common.choices import OrderStatus
from rest_framework import serializers

from .models import Order, OrderItem


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120)
    zip_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=32)


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "name", "image", "variant", "quantity", "unit_price", "line_total"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    total_items = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "status",
            "payment_status",
            "email",
            "items",
            "total_items",
            "subtotal",
            "shipping_cost",
            "tax",
            "discount",
            "total",
            "currency",
            "coupon_code",
            "shipping_address",
            "billing_address",
            "notes",
            "payment_method",
            "tracking_number",
            "paid_at",
            "confirmed_at",
            "cancelled_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    user = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + ["user", "payment_intent_id"]
        read_only_fields = fields

    def get_user(self, obj: Order) -> dict:
        user = obj.user
        return {"id": user.id, "email": user.email, "name": user.display_name}


class OrderTrackSerializer(serializers.ModelSerializer):
    class Meta:
        model = Order
        fields = ["id", "number", "status", "payment_status", "tracking_number", "created_at", "updated_at"]
        read_only_fields = fields


class OrderCreateSerializer(serializers.Serializer):
    shipping_address = AddressSerializer()
    billing_address = AddressSerializer(required=False, allow_null=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class OrderTrackingSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(max_length=64)
