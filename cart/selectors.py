"""Selectors for read-only cart queries."""

from .models import Cart


def get_cart_for_user(*, user) -> Cart:
    """Return the user's cart, creating it if missing."""

    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def get_cart_for_session(*, session_id: str) -> Cart:
    """Return the guest session's cart, creating it if missing."""

    cart, _ = Cart.objects.get_or_create(user=None, session_id=session_id)
    return cart


def find_cart_for_session(*, session_id: str):
    return Cart.objects.filter(user__isnull=True, session_id=session_id).first()


def cart_with_items(cart: Cart) -> Cart:
    """Re-fetch a cart with its items and products prefetched."""

    return Cart.objects.prefetch_related("items__product").get(pk=cart.pk)
