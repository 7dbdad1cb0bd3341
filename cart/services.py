"""Cart services: line mutations, coupons, and guest-cart merging.

Services receive an already-resolved `cart` (user or guest) so the same code
serves both owners. Stock is checked, never moved: stock only leaves the
catalog when an order is confirmed.
"""

import logging
from decimal import Decimal

from catalog.models import Product
from catalog.selectors import get_published_product
from common.errors import CouponError, InsufficientStockError, NotFoundError, ValidationFailedError
from coupons.services import validate_coupon
from django.db import transaction

from .models import Cart, CartItem
from .selectors import find_cart_for_session, get_cart_for_user

logger = logging.getLogger("storefront.cart")


def _log(event: str, cart: Cart, **fields) -> None:
    try:
        logger.info(
            event,
            extra={
                "event": event,
                "cart_id": cart.id,
                "user_id": cart.user_id,
                "guest": cart.user_id is None,
                **fields,
            },
        )
    except Exception:
        pass


def _lock(cart: Cart) -> Cart:
    return Cart.objects.select_for_update().get(pk=cart.pk)


def _get_available_product(product_id: int) -> Product:
    product = get_published_product(product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _ensure_stock(product: Product, quantity: int) -> None:
    if product.stock < quantity:
        raise InsufficientStockError(
            f'Only {product.stock} unit(s) of "{product.title}" available',
            errors={"quantity": [f"Maximum available is {product.stock}."]},
        )


def _refresh_coupon(cart: Cart) -> None:
    """Recompute the stored coupon discount after the cart contents changed.

    A coupon that no longer validates (e.g. subtotal fell below its minimum)
    is dropped from the cart.
    """

    if not cart.coupon_code:
        return
    try:
        _, discount = validate_coupon(code=cart.coupon_code, cart_total=cart.subtotal)
    except CouponError as exc:
        _log("cart.coupon_dropped", cart, coupon_code=cart.coupon_code, reason=exc.code)
        cart.coupon_code = ""
        cart.coupon_discount = Decimal("0.00")
    else:
        cart.coupon_discount = discount
    cart.save(update_fields=["coupon_code", "coupon_discount", "updated_at"])


@transaction.atomic
def add_item(*, cart: Cart, product_id: int, quantity: int, variant: str = "") -> CartItem:
    """Add a product to the cart; an existing (product, variant) line is summed."""

    if quantity <= 0:
        raise ValidationFailedError("Quantity must be positive")
    cart = _lock(cart)
    product = _get_available_product(product_id)
    variant = (variant or "").strip()

    item = CartItem.objects.filter(cart=cart, product=product, variant=variant).first()
    new_quantity = quantity + (int(item.quantity) if item else 0)
    _ensure_stock(product, new_quantity)

    if item:
        item.quantity = new_quantity
        item.unit_price = product.price
        item.save(update_fields=["quantity", "unit_price", "updated_at"])
        _log("cart.item_updated", cart, product_id=product.id, quantity=new_quantity)
    else:
        item = CartItem.objects.create(
            cart=cart, product=product, variant=variant, quantity=quantity, unit_price=product.price
        )
        _log("cart.item_added", cart, product_id=product.id, quantity=quantity)
    _refresh_coupon(cart)
    return item


@transaction.atomic
def update_item_quantity(*, cart: Cart, item_id: int, quantity: int) -> CartItem:
    """Set a line's quantity, re-checking stock and refreshing its price."""

    if quantity <= 0:
        raise ValidationFailedError("Quantity must be positive")
    cart = _lock(cart)
    try:
        item = CartItem.objects.select_related("product").get(id=item_id, cart=cart)
    except CartItem.DoesNotExist:
        raise NotFoundError("Item not found in cart")
    _ensure_stock(item.product, quantity)
    item.quantity = quantity
    item.unit_price = item.product.price
    item.save(update_fields=["quantity", "unit_price", "updated_at"])
    _log("cart.item_updated", cart, product_id=item.product_id, quantity=quantity)
    _refresh_coupon(cart)
    return item


@transaction.atomic
def remove_item(*, cart: Cart, item_id: int) -> None:
    cart = _lock(cart)
    deleted, _ = CartItem.objects.filter(id=item_id, cart=cart).delete()
    if not deleted:
        raise NotFoundError("Item not found in cart")
    _log("cart.item_removed", cart, item_id=item_id)
    _refresh_coupon(cart)


@transaction.atomic
def clear_cart(*, cart: Cart) -> None:
    """Empty the cart and reset its coupon."""

    cart = _lock(cart)
    CartItem.objects.filter(cart=cart).delete()
    Cart.objects.filter(pk=cart.pk).update(coupon_code="", coupon_discount=Decimal("0.00"))
    _log("cart.cleared", cart)


@transaction.atomic
def apply_coupon(*, cart: Cart, code: str) -> Cart:
    """Validate a coupon against the current subtotal and attach it."""

    cart = _lock(cart)
    if not cart.items.exists():
        raise ValidationFailedError("Cart is empty")
    coupon, discount = validate_coupon(code=code, cart_total=cart.subtotal)
    cart.coupon_code = coupon.code
    cart.coupon_discount = discount
    cart.save(update_fields=["coupon_code", "coupon_discount", "updated_at"])
    _log("cart.coupon_applied", cart, coupon_code=coupon.code, discount=str(discount))
    return cart


@transaction.atomic
def remove_coupon(*, cart: Cart) -> Cart:
    cart = _lock(cart)
    cart.coupon_code = ""
    cart.coupon_discount = Decimal("0.00")
    cart.save(update_fields=["coupon_code", "coupon_discount", "updated_at"])
    _log("cart.coupon_removed", cart)
    return cart


@transaction.atomic
def merge_guest_cart_to_user(*, session_id: str, user) -> Cart:
    """Move a guest cart's lines into the user's cart.

    Quantities of matching (product, variant) lines are summed. Lines whose
    product is gone, unpublished, or lacks stock for the merged quantity are
    skipped. The guest cart is deleted afterwards.
    """

    dest = _lock(get_cart_for_user(user=user))
    src = find_cart_for_session(session_id=session_id)
    if src is None:
        return dest
    src = _lock(src)

    merged = 0
    skipped = 0
    for s_item in src.items.select_related("product"):
        product = s_item.product
        if product.status != Product.STATUS_PUBLISHED:
            skipped += 1
            continue
        d_item = CartItem.objects.filter(cart=dest, product=product, variant=s_item.variant).first()
        quantity = int(s_item.quantity) + (int(d_item.quantity) if d_item else 0)
        if product.stock < quantity:
            skipped += 1
            continue
        if d_item:
            d_item.quantity = quantity
            d_item.unit_price = product.price
            d_item.save(update_fields=["quantity", "unit_price", "updated_at"])
        else:
            CartItem.objects.create(
                cart=dest, product=product, variant=s_item.variant, quantity=quantity, unit_price=product.price
            )
        merged += 1

    src_id = src.id
    src.delete()
    _refresh_coupon(dest)
    _log("cart.merged", dest, src_cart_id=src_id, session_id=session_id, merged=merged, skipped=skipped)
    return dest
