"""Product review models.

One review per user and product. Only approved reviews are public and only
they count towards `Product.average_rating` / `Product.review_count`.
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Review(TimeStampedModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name="reviews", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="reviews", on_delete=models.CASCADE)
    order = models.ForeignKey(
        "orders.Order", null=True, blank=True, related_name="reviews", on_delete=models.SET_NULL
    )
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=100)
    comment = models.TextField(max_length=1000)
    images = models.JSONField(default=list, blank=True)
    is_verified_purchase = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=False)
    helpful_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="uniq_review_user_product"),
            models.CheckConstraint(name="review_rating_range", condition=models.Q(rating__gte=1, rating__lte=5)),
        ]
        indexes = [
            models.Index(fields=["product", "is_approved"]),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"Review product={self.product_id} user={self.user_id} rating={self.rating}"
