from datetime import timedelta
from decimal import Decimal

import pytest
from common.errors import CouponError
from coupons.models import Coupon
from coupons.services import calculate_discount, consume_coupon, validate_coupon
from coupons.tests.factories import CouponFactory
from django.utils import timezone


@pytest.mark.django_db
def test_percentage_discount_capped_by_max():
    CouponFactory(code="SAVE20", value=Decimal("20"), max_discount_amount=Decimal("15"))

    _, on_100 = validate_coupon(code="save20", cart_total=Decimal("100"))
    _, on_50 = validate_coupon(code="SAVE20", cart_total=Decimal("50"))

    assert on_100 == Decimal("15.00")
    assert on_50 == Decimal("10.00")


@pytest.mark.django_db
def test_fixed_discount_clamped_to_cart_total():
    coupon = CouponFactory(type=Coupon.TYPE_FIXED, value=Decimal("10"))
    assert calculate_discount(coupon, Decimal("5")) == Decimal("5.00")
    assert calculate_discount(coupon, Decimal("30")) == Decimal("10.00")


@pytest.mark.django_db
def test_discount_rounded_to_cents():
    coupon = CouponFactory(value=Decimal("15"))
    assert calculate_discount(coupon, Decimal("33.33")) == Decimal("5.00")
    assert calculate_discount(coupon, Decimal("10.03")) == Decimal("1.50")


@pytest.mark.django_db
def test_code_stored_upper_case():
    coupon = CouponFactory(code="  welcome ")
    coupon.refresh_from_db()
    assert coupon.code == "WELCOME"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "overrides, cart_total, code",
    [
        ({"is_active": False}, "100", "coupon_inactive"),
        ({"valid_until": timezone.now() - timedelta(days=1)}, "100", "coupon_expired"),
        ({"valid_from": timezone.now() + timedelta(days=1)}, "100", "coupon_expired"),
        ({"usage_limit": 2, "used_count": 2}, "100", "coupon_usage_limit"),
        ({"min_order_amount": Decimal("50")}, "49.99", "coupon_min_order"),
    ],
)
def test_validation_failures(overrides, cart_total, code):
    CouponFactory(code="CHECK", **overrides)
    with pytest.raises(CouponError) as exc:
        validate_coupon(code="CHECK", cart_total=Decimal(cart_total))
    assert exc.value.code == code


@pytest.mark.django_db
def test_validation_checks_active_before_expiry():
    CouponFactory(code="OLD", is_active=False, valid_until=timezone.now() - timedelta(days=1))
    with pytest.raises(CouponError) as exc:
        validate_coupon(code="OLD", cart_total=Decimal("10"))
    assert str(exc.value) == "Coupon is not active"


@pytest.mark.django_db
def test_unknown_code():
    with pytest.raises(CouponError) as exc:
        validate_coupon(code="NOPE", cart_total=Decimal("10"))
    assert exc.value.code == "coupon_not_found"


@pytest.mark.django_db
def test_consume_respects_usage_limit():
    coupon = CouponFactory(code="ONCE", usage_limit=1)
    consume_coupon("once")
    coupon.refresh_from_db()
    assert coupon.used_count == 1
    assert coupon.is_usage_limit_reached
    with pytest.raises(CouponError):
        consume_coupon("ONCE")
