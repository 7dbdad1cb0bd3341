from decimal import Decimal

from rest_framework import serializers

from .models import Coupon


class CouponValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=40)
    cart_total = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))


class CouponValidateResultSerializer(serializers.Serializer):
    code = serializers.CharField()
    type = serializers.CharField()
    value = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    min_order_amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class CouponAdminSerializer(serializers.ModelSerializer):
    is_expired = serializers.BooleanField(read_only=True)
    is_usage_limit_reached = serializers.BooleanField(read_only=True)
    is_valid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "type",
            "value",
            "min_order_amount",
            "max_discount_amount",
            "usage_limit",
            "used_count",
            "valid_from",
            "valid_until",
            "is_active",
            "is_expired",
            "is_usage_limit_reached",
            "is_valid",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["used_count", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        code = value.strip().upper()
        if len(code) < 3:
            raise serializers.ValidationError("Coupon code must be at least 3 characters.")
        qs = Coupon.objects.filter(code__iexact=code)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("Coupon code already exists.")
        return code

    def validate(self, attrs):
        ctype = attrs.get("type", getattr(self.instance, "type", None))
        value = attrs.get("value", getattr(self.instance, "value", None))
        if value is not None and value <= 0:
            raise serializers.ValidationError({"value": "Must be greater than zero."})
        if ctype == Coupon.TYPE_PERCENTAGE and value is not None and value > 100:
            raise serializers.ValidationError({"value": "Percentage cannot exceed 100."})
        valid_from = attrs.get("valid_from", getattr(self.instance, "valid_from", None))
        valid_until = attrs.get("valid_until", getattr(self.instance, "valid_until", None))
        if valid_from and valid_until and valid_until <= valid_from:
            raise serializers.ValidationError({"valid_until": "Must be after valid_from."})
        return attrs
