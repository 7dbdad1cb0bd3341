"""Order pricing policy: tax and shipping.

Rates come from settings so deployments can change them without code edits.
All amounts are rounded half-up to cents.
"""

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

CENT = Decimal("0.01")


def money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def tax_for(subtotal: Decimal) -> Decimal:
    return money(Decimal(subtotal) * Decimal(str(settings.ORDER_TAX_RATE)))


def shipping_for(subtotal: Decimal) -> Decimal:
    threshold = getattr(settings, "FREE_SHIPPING_THRESHOLD", None)
    if threshold not in (None, "") and Decimal(subtotal) >= Decimal(str(threshold)):
        return Decimal("0.00")
    return money(Decimal(str(settings.SHIPPING_FLAT_RATE)))


def compute_totals(*, subtotal: Decimal, discount: Decimal = Decimal("0.00")) -> dict:
    """Return the order money fields for a subtotal and a requested discount.

    The discount is clamped to the subtotal.
    """

    subtotal = money(subtotal)
    discount = money(min(max(Decimal(discount or 0), Decimal("0")), subtotal))
    tax = tax_for(subtotal)
    shipping_cost = shipping_for(subtotal)
    return {
        "subtotal": subtotal,
        "shipping_cost": shipping_cost,
        "tax": tax,
        "discount": discount,
        "total": subtotal + shipping_cost + tax - discount,
    }
