from datetime import timedelta
from decimal import Decimal

import factory
from coupons.models import Coupon
from django.utils import timezone
from factory.django import DjangoModelFactory


class CouponFactory(DjangoModelFactory):
    class Meta:
        model = Coupon

    code = factory.Sequence(lambda n: f"SAVE{n:03d}")
    type = Coupon.TYPE_PERCENTAGE
    value = Decimal("10.00")
    min_order_amount = Decimal("0.00")
    valid_from = factory.LazyFunction(lambda: timezone.now() - timedelta(days=1))
    valid_until = factory.LazyFunction(lambda: timezone.now() + timedelta(days=30))
    is_active = True
