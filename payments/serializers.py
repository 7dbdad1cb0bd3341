from orders.models import Order
from rest_framework import serializers


class CreateIntentSerializer(serializers.Serializer):
    order_id = serializers.IntegerField(min_value=1)


class IntentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField()
    client_secret = serializers.CharField(allow_null=True)
    amount = serializers.IntegerField()
    currency = serializers.CharField()
    status = serializers.CharField()


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=128)
    payment_method_id = serializers.CharField(max_length=128)


class ConfirmResultSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField()
    status = serializers.CharField()
    order_id = serializers.IntegerField()
    order_status = serializers.CharField()
    payment_status = serializers.CharField()


class PaymentStatusSerializer(serializers.ModelSerializer):
    order_id = serializers.IntegerField(source="id", read_only=True)

    class Meta:
        model = Order
        fields = [
            "order_id",
            "number",
            "payment_status",
            "payment_method",
            "payment_intent_id",
            "total",
            "currency",
            "paid_at",
        ]
        read_only_fields = fields
