"""Review services.

Every write that can change the set of approved reviews recomputes the
product's `average_rating` and `review_count` in the same transaction.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from catalog.models import Product
from catalog.selectors import get_published_product
from common.choices import OrderStatus
from common.errors import ConflictError, NotFoundError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F
from orders.models import Order

from .models import Review

logger = logging.getLogger("storefront.reviews")

EDITABLE_FIELDS = ("rating", "title", "comment", "images")


def _log(event: str, review: Review, **fields) -> None:
    try:
        logger.info(
            event,
            extra={
                "event": event,
                "review_id": review.id,
                "product_id": review.product_id,
                "user_id": review.user_id,
                **fields,
            },
        )
    except Exception:
        # Logging should never break mutations
        pass


def refresh_product_rating(product_id: int) -> None:
    """Store the approved reviews' mean rating (one decimal) and count on the product."""

    agg = Review.objects.filter(product_id=product_id, is_approved=True).aggregate(avg=Avg("rating"), n=Count("id"))
    average = Decimal(str(agg["avg"] or 0)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    Product.objects.filter(pk=product_id).update(average_rating=average, review_count=agg["n"])


def get_review(review_id: int, *, user=None) -> Review:
    qs = Review.objects.all()
    if user is not None:
        qs = qs.filter(user=user)
    try:
        return qs.get(pk=review_id)
    except Review.DoesNotExist:
        raise NotFoundError("Review not found")


def find_delivered_order(*, user, product_id: int) -> Optional[Order]:
    return (
        Order.objects.filter(user=user, status=OrderStatus.DELIVERED, items__product_id=product_id)
        .order_by("-created_at")
        .first()
    )


@transaction.atomic
def create_review(
    *,
    user,
    product_id: int,
    rating: int,
    title: str,
    comment: str,
    images: Optional[list] = None,
) -> Review:
    """Review a published product once.

    A delivered order containing the product marks the review as a verified
    purchase and publishes it straight away; other reviews wait for approval.
    """

    if get_published_product(product_id) is None:
        raise NotFoundError("Product not found")
    order = find_delivered_order(user=user, product_id=product_id)
    try:
        with transaction.atomic():
            review = Review.objects.create(
                user=user,
                product_id=product_id,
                order=order,
                rating=rating,
                title=title,
                comment=comment,
                images=list(images or []),
                is_verified_purchase=order is not None,
                is_approved=order is not None,
            )
    except IntegrityError:
        raise ConflictError("You have already reviewed this product", code="already_reviewed")

    if review.is_approved:
        refresh_product_rating(product_id)
    _log("review_created", review, verified=review.is_verified_purchase)
    return review


@transaction.atomic
def update_review(review: Review, **changes) -> Review:
    """Apply owner edits; omitted fields keep their values."""

    fields = [name for name in EDITABLE_FIELDS if name in changes]
    if not fields:
        return review
    for name in fields:
        setattr(review, name, changes[name])
    review.save(update_fields=[*fields, "updated_at"])
    if review.is_approved:
        refresh_product_rating(review.product_id)
    _log("review_updated", review, fields=fields)
    return review


@transaction.atomic
def delete_review(review: Review, *, user) -> None:
    """Owners delete their own reviews; staff delete any."""

    if review.user_id != user.id and not user.is_staff:
        raise NotFoundError("Review not found")
    product_id = review.product_id
    was_approved = review.is_approved
    _log("review_deleted", review, by_staff=review.user_id != user.id)
    review.delete()
    if was_approved:
        refresh_product_rating(product_id)


def mark_helpful(review: Review) -> Review:
    if not review.is_approved:
        raise NotFoundError("Review not found")
    Review.objects.filter(pk=review.pk).update(helpful_count=F("helpful_count") + 1)
    review.refresh_from_db(fields=["helpful_count"])
    return review


@transaction.atomic
def approve_review(review: Review) -> Review:
    """Publish a review. Approving twice is a no-op."""

    if Review.objects.filter(pk=review.pk, is_approved=False).update(is_approved=True):
        review.refresh_from_db()
        refresh_product_rating(review.product_id)
        _log("review_approved", review)
    return review
