"""Coupon validation and discount computation.

Validation is read-only; `consume_coupon` is the only write and is called by
order creation inside its transaction.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from common.errors import CouponError
from django.db.models import F, Q

from .models import Coupon

logger = logging.getLogger("storefront.coupons")

CENT = Decimal("0.01")


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def get_coupon(code: str) -> Coupon:
    normalized = (code or "").strip()
    try:
        return Coupon.objects.get(code__iexact=normalized)
    except Coupon.DoesNotExist:
        raise CouponError("Invalid coupon code", code="coupon_not_found")


def calculate_discount(coupon: Coupon, cart_total) -> Decimal:
    """Discount for `cart_total`, never more than the total itself."""

    total = Decimal(cart_total)
    if coupon.type == Coupon.TYPE_PERCENTAGE:
        discount = total * Decimal(coupon.value) / Decimal("100")
        if coupon.max_discount_amount is not None:
            discount = min(discount, Decimal(coupon.max_discount_amount))
    else:
        discount = Decimal(coupon.value)
    discount = min(discount, total)
    return _money(max(discount, Decimal("0")))


def validate_coupon(*, code: str, cart_total) -> tuple[Coupon, Decimal]:
    """Check a code against a cart total; returns the coupon and its discount.

    Checks run in order and the first failure is reported: exists, active,
    within its validity window, under its usage limit, minimum order met.
    """

    coupon = get_coupon(code)
    if not coupon.is_active:
        raise CouponError("Coupon is not active", code="coupon_inactive")
    if coupon.is_expired:
        raise CouponError("Coupon has expired", code="coupon_expired")
    if coupon.is_usage_limit_reached:
        raise CouponError("Coupon usage limit has been reached", code="coupon_usage_limit")
    total = Decimal(cart_total)
    if total < coupon.min_order_amount:
        raise CouponError(
            f"Minimum order amount of {coupon.min_order_amount} required",
            code="coupon_min_order",
        )
    return coupon, calculate_discount(coupon, total)


def consume_coupon(coupon_code: str) -> None:
    """Count one use of a coupon, guarded by its usage limit.

    Must run inside the caller's transaction so a failed order releases the use.
    """

    updated = (
        Coupon.objects.filter(code__iexact=coupon_code)
        .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
        .update(used_count=F("used_count") + 1)
    )
    if not updated:
        raise CouponError("Coupon usage limit has been reached", code="coupon_usage_limit")
    try:
        logger.info("coupon_consumed", extra={"event": "coupon_consumed", "coupon_code": coupon_code})
    except Exception:
        pass
