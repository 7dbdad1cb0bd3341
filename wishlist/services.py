"""Wishlist services."""

import logging

from cart.selectors import get_cart_for_user
from cart.services import add_item
from catalog.selectors import get_published_product
from common.errors import NotFoundError
from django.db import transaction

from .models import Wishlist, WishlistItem

logger = logging.getLogger("storefront.wishlist")


def get_wishlist(*, user) -> Wishlist:
    wishlist, _ = Wishlist.objects.get_or_create(user=user)
    return wishlist


def wishlist_with_items(wishlist: Wishlist) -> Wishlist:
    return Wishlist.objects.prefetch_related("items__product").get(pk=wishlist.pk)


def add_product(*, user, product_id: int) -> tuple[Wishlist, bool]:
    """Add a published product; returns `(wishlist, created)`. Re-adding is a no-op."""

    if get_published_product(product_id) is None:
        raise NotFoundError("Product not found")
    wishlist = get_wishlist(user=user)
    _, created = WishlistItem.objects.get_or_create(wishlist=wishlist, product_id=product_id)
    if created:
        logger.info(
            "wishlist.item_added",
            extra={"event": "wishlist.item_added", "user_id": user.id, "product_id": product_id},
        )
    return wishlist, created


def remove_product(*, user, product_id: int) -> Wishlist:
    wishlist = get_wishlist(user=user)
    WishlistItem.objects.filter(wishlist=wishlist, product_id=product_id).delete()
    return wishlist


def clear_wishlist(*, user) -> Wishlist:
    wishlist = get_wishlist(user=user)
    WishlistItem.objects.filter(wishlist=wishlist).delete()
    return wishlist


@transaction.atomic
def move_to_cart(*, user, product_id: int) -> Wishlist:
    """Add one unit of a wishlisted product to the cart and drop it from the wishlist.

    Cart rules apply: the product must be published and in stock.
    """

    wishlist = get_wishlist(user=user)
    item = WishlistItem.objects.filter(wishlist=wishlist, product_id=product_id).first()
    if item is None:
        raise NotFoundError("Item not found in wishlist")
    add_item(cart=get_cart_for_user(user=user), product_id=product_id, quantity=1)
    item.delete()
    logger.info(
        "wishlist.moved_to_cart",
        extra={"event": "wishlist.moved_to_cart", "user_id": user.id, "product_id": product_id},
    )
    return wishlist
