"""Order models.

An order is an immutable snapshot of a checkout: lines, prices and totals
are copied at creation and never recomputed. Only lifecycle fields
(`status`, `payment_status`, payment references, tracking) change later.
"""

from decimal import Decimal

from common.choices import OrderStatus, PaymentStatus
from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Order(TimeStampedModel):
    """Purchase order capturing a snapshot of a user's cart.

    Totals are denormalized and computed once by `orders.pricing`:
    `total = subtotal + shipping_cost + tax - discount`.
    """

    STATUS_PENDING = OrderStatus.PENDING
    STATUS_CONFIRMED = OrderStatus.CONFIRMED
    STATUS_PROCESSING = OrderStatus.PROCESSING
    STATUS_SHIPPED = OrderStatus.SHIPPED
    STATUS_DELIVERED = OrderStatus.DELIVERED
    STATUS_CANCELLED = OrderStatus.CANCELLED
    STATUS_REFUNDED = OrderStatus.REFUNDED
    STATUS_CHOICES = OrderStatus.choices

    # Statuses at which the order's stock has left the catalog
    STOCK_COMMITTED_STATUSES = (STATUS_CONFIRMED, STATUS_PROCESSING, STATUS_SHIPPED, STATUS_DELIVERED)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="orders", on_delete=models.PROTECT)
    number = models.CharField(max_length=32, unique=True)
    email = models.EmailField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    payment_status = models.CharField(
        max_length=16, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="usd")

    shipping_address = models.JSONField()
    billing_address = models.JSONField()
    coupon_code = models.CharField(max_length=40, blank=True)
    notes = models.TextField(max_length=1000, blank=True)

    payment_intent_id = models.CharField(max_length=128, null=True, blank=True, unique=True)
    payment_method = models.CharField(max_length=64, blank=True)
    tracking_number = models.CharField(max_length=64, blank=True)

    paid_at = models.DateTimeField(null=True, blank=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "status", "created_at"]),
            models.Index(fields=["created_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                name="order_amounts_non_negative",
                condition=models.Q(
                    subtotal__gte=0, shipping_cost__gte=0, tax__gte=0, discount__gte=0, total__gte=0
                ),
            ),
            models.CheckConstraint(
                name="order_discount_within_subtotal", condition=models.Q(discount__lte=models.F("subtotal"))
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Order {self.number} user={self.user_id} status={self.status}"

    @property
    def total_items(self) -> int:
        return sum(int(item.quantity) for item in self.items.all())

    @property
    def stock_committed(self) -> bool:
        return self.status in self.STOCK_COMMITTED_STATUSES


class OrderItem(models.Model):
    """Line item within an order.

    Snapshots product name, first image and unit price at order time.
    """

    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey(
        "catalog.Product", null=True, blank=True, related_name="order_items", on_delete=models.SET_NULL
    )
    name = models.CharField(max_length=200)
    image = models.URLField(max_length=500, blank=True)
    variant = models.CharField(max_length=64, blank=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["order", "product"]),
        ]
        constraints = [
            models.CheckConstraint(name="orderitem_price_non_negative", condition=models.Q(unit_price__gte=0)),
            models.CheckConstraint(name="orderitem_quantity_positive", condition=models.Q(quantity__gte=1)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"OrderItem#{self.id} order={self.order_id} product={self.product_id} qty={self.quantity}"


class IdempotencyKey(TimeStampedModel):
    """Stores idempotent request results to prevent duplicate processing."""

    key = models.CharField(max_length=128)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.CASCADE)
    scope = models.CharField(max_length=128)
    path = models.CharField(max_length=255)
    method = models.CharField(max_length=16)
    request_hash = models.CharField(max_length=64, null=True, blank=True)
    response_code = models.IntegerField(null=True, blank=True)
    response_json = models.JSONField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["key", "scope", "path", "method"], name="uniq_idem_scope_path_method"),
        ]
