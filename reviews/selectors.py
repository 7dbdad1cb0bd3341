from typing import Optional

from django.db.models import QuerySet

from .models import Review


def list_product_reviews(product_id: int) -> QuerySet[Review]:
    """Approved reviews of a product, newest first."""

    return Review.objects.filter(product_id=product_id, is_approved=True).select_related("user")


def list_reviews(*, is_approved: Optional[bool] = None) -> QuerySet[Review]:
    qs = Review.objects.select_related("user", "product")
    if is_approved is not None:
        qs = qs.filter(is_approved=is_approved)
    return qs
