"""Catalog app models.

Defines the browsable catalog: hierarchical categories and products. A
product carries its own on-hand `stock`; that column is only ever changed by
`inventory.services`, which pairs every change with a ledger entry.
"""

from decimal import Decimal

from common.choices import DraftPublished
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Category(TimeStampedModel):
    """Hierarchical product categorization."""

    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140, unique=True)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.SET_NULL,
    )
    is_active = models.BooleanField(default=True, db_index=True)
    sort_order = models.IntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Product(TimeStampedModel):
    """Core product entity with on-hand stock."""

    STATUS_DRAFT = DraftPublished.DRAFT
    STATUS_PUBLISHED = DraftPublished.PUBLISHED
    STATUS_CHOICES = DraftPublished.choices

    title = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=500, blank=True)
    brand = models.CharField(max_length=120, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    categories = models.ManyToManyField(Category, related_name="products", blank=True)

    price = models.DecimalField(max_digits=12, decimal_places=2)
    compare_at_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    stock = models.IntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=10)

    images = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list, blank=True)
    is_featured = models.BooleanField(default=False, db_index=True)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=Decimal("0.00"))
    review_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["title"]
        constraints = [
            models.CheckConstraint(name="product_stock_non_negative", condition=models.Q(stock__gte=0)),
            models.CheckConstraint(name="product_price_non_negative", condition=models.Q(price__gte=0)),
        ]
        indexes = [
            models.Index(fields=["status", "is_featured"]),
            models.Index(fields=["stock"]),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.title

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock <= self.low_stock_threshold

    @property
    def discount_percentage(self) -> int:
        if self.compare_at_price and self.compare_at_price > self.price:
            return int(round((self.compare_at_price - self.price) / self.compare_at_price * 100))
        return 0

    @property
    def primary_image(self):
        return self.images[0] if self.images else None
