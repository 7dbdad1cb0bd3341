"""Cart app models.

A cart belongs to exactly one owner: an authenticated user or an anonymous
guest session. Carts are created lazily and emptied, not deleted, when an
order is placed.
"""

from decimal import Decimal

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Cart(TimeStampedModel):
    """Shopping cart bound to a user or a guest `session_id`."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="cart",
        on_delete=models.CASCADE,
    )
    session_id = models.CharField(max_length=64, null=True, blank=True, unique=True)
    coupon_code = models.CharField(max_length=40, blank=True)
    coupon_discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.CheckConstraint(
                name="cart_single_owner",
                condition=(
                    models.Q(user__isnull=False, session_id__isnull=True)
                    | models.Q(user__isnull=True, session_id__isnull=False)
                ),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        owner = f"user={self.user_id}" if self.user_id else f"session={self.session_id}"
        return f"Cart#{self.id} ({owner})"

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items.all()), Decimal("0.00"))

    @property
    def total_items(self) -> int:
        return sum(int(item.quantity) for item in self.items.all())

    @property
    def total(self) -> Decimal:
        return max(self.subtotal - (self.coupon_discount or Decimal("0.00")), Decimal("0.00"))


class CartItem(TimeStampedModel):
    """Line item for a product (and optional variant label) in a cart."""

    cart = models.ForeignKey(Cart, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="cart_items", on_delete=models.CASCADE)
    variant = models.CharField(max_length=64, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["cart", "product", "variant"], name="unique_product_variant_per_cart"),
            models.CheckConstraint(name="cartitem_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} cart={self.cart_id} product={self.product_id} qty={self.quantity}"

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price or Decimal("0.00")) * Decimal(int(self.quantity))
