"""Coupon models.

Codes are stored upper-case and matched case-insensitively.
"""

from decimal import Decimal

from common.choices import DiscountType
from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Coupon(TimeStampedModel):
    TYPE_PERCENTAGE = DiscountType.PERCENTAGE
    TYPE_FIXED = DiscountType.FIXED

    code = models.CharField(max_length=40, unique=True)
    description = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=16, choices=DiscountType.choices)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    min_order_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    max_discount_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    used_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(name="coupon_value_positive", condition=models.Q(value__gt=0)),
            models.CheckConstraint(
                name="coupon_percentage_at_most_100",
                condition=~models.Q(type=DiscountType.PERCENTAGE) | models.Q(value__lte=100),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.code

    def save(self, *args, **kwargs):
        if self.code:
            self.code = self.code.strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_expired(self) -> bool:
        now = timezone.now()
        if self.valid_from and now < self.valid_from:
            return True
        return bool(self.valid_until and now > self.valid_until)

    @property
    def is_usage_limit_reached(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    @property
    def is_valid(self) -> bool:
        return self.is_active and not self.is_expired and not self.is_usage_limit_reached
