from decimal import Decimal

import pytest
from cart.models import Cart, CartItem
from cart.selectors import get_cart_for_session, get_cart_for_user
from cart.services import (
    add_item,
    apply_coupon,
    clear_cart,
    merge_guest_cart_to_user,
    remove_coupon,
    remove_item,
    update_item_quantity,
)
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from common.errors import CouponError, InsufficientStockError, NotFoundError, ValidationFailedError
from coupons.tests.factories import CouponFactory
from django.db import IntegrityError, transaction
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_add_same_product_sums_quantity():
    cart = get_cart_for_user(user=UserFactory())
    product = ProductFactory(stock=10, price=Decimal("25.00"))

    add_item(cart=cart, product_id=product.id, quantity=2)
    item = add_item(cart=cart, product_id=product.id, quantity=3)

    assert item.quantity == 5
    assert cart.items.count() == 1
    assert cart.subtotal == Decimal("125.00")
    assert cart.total_items == 5


@pytest.mark.django_db
def test_variants_are_separate_lines():
    cart = get_cart_for_user(user=UserFactory())
    product = ProductFactory(stock=10)
    add_item(cart=cart, product_id=product.id, quantity=1, variant="red")
    add_item(cart=cart, product_id=product.id, quantity=1, variant="blue")
    assert cart.items.count() == 2


@pytest.mark.django_db
def test_add_rejects_cumulative_quantity_above_stock():
    cart = get_cart_for_user(user=UserFactory())
    product = ProductFactory(stock=3)
    add_item(cart=cart, product_id=product.id, quantity=2)
    with pytest.raises(InsufficientStockError):
        add_item(cart=cart, product_id=product.id, quantity=2)
    assert cart.items.get().quantity == 2


@pytest.mark.django_db
def test_add_rejects_unpublished_or_missing_product():
    cart = get_cart_for_user(user=UserFactory())
    draft = ProductFactory(stock=5, status=Product.STATUS_DRAFT)
    with pytest.raises(NotFoundError):
        add_item(cart=cart, product_id=draft.id, quantity=1)
    with pytest.raises(NotFoundError):
        add_item(cart=cart, product_id=999999, quantity=1)
    with pytest.raises(ValidationFailedError):
        add_item(cart=cart, product_id=draft.id, quantity=0)


@pytest.mark.django_db
def test_update_refreshes_price_and_checks_stock():
    cart = get_cart_for_user(user=UserFactory())
    product = ProductFactory(stock=4, price=Decimal("10.00"))
    item = add_item(cart=cart, product_id=product.id, quantity=1)

    Product.objects.filter(pk=product.pk).update(price=Decimal("12.00"))
    item = update_item_quantity(cart=cart, item_id=item.id, quantity=3)
    assert item.unit_price == Decimal("12.00")

    with pytest.raises(InsufficientStockError):
        update_item_quantity(cart=cart, item_id=item.id, quantity=5)


@pytest.mark.django_db
def test_items_are_scoped_to_their_cart():
    cart_a = get_cart_for_user(user=UserFactory())
    cart_b = get_cart_for_user(user=UserFactory())
    item = add_item(cart=cart_a, product_id=ProductFactory(stock=2).id, quantity=1)

    with pytest.raises(NotFoundError):
        update_item_quantity(cart=cart_b, item_id=item.id, quantity=2)
    with pytest.raises(NotFoundError):
        remove_item(cart=cart_b, item_id=item.id)

    remove_item(cart=cart_a, item_id=item.id)
    assert not CartItem.objects.filter(pk=item.pk).exists()


@pytest.mark.django_db
def test_coupon_apply_refresh_and_clear():
    CouponFactory(code="SAVE10", value=Decimal("10"), min_order_amount=Decimal("40"))
    cart = get_cart_for_user(user=UserFactory())
    product = ProductFactory(stock=10, price=Decimal("25.00"))
    item = add_item(cart=cart, product_id=product.id, quantity=2)

    cart = apply_coupon(cart=cart, code="save10")
    assert (cart.coupon_code, cart.coupon_discount) == ("SAVE10", Decimal("5.00"))

    update_item_quantity(cart=cart, item_id=item.id, quantity=4)
    cart.refresh_from_db()
    assert cart.coupon_discount == Decimal("10.00")
    assert cart.total == Decimal("90.00")

    # Falling below the minimum drops the coupon
    update_item_quantity(cart=cart, item_id=item.id, quantity=1)
    cart.refresh_from_db()
    assert cart.coupon_code == ""
    assert cart.coupon_discount == Decimal("0.00")

    add_item(cart=cart, product_id=product.id, quantity=2)
    apply_coupon(cart=cart, code="SAVE10")
    clear_cart(cart=cart)
    cart.refresh_from_db()
    assert cart.items.count() == 0
    assert cart.coupon_code == ""


@pytest.mark.django_db
def test_apply_coupon_errors():
    cart = get_cart_for_user(user=UserFactory())
    with pytest.raises(ValidationFailedError):
        apply_coupon(cart=cart, code="ANY")
    add_item(cart=cart, product_id=ProductFactory(stock=1).id, quantity=1)
    with pytest.raises(CouponError):
        apply_coupon(cart=cart, code="MISSING")
    remove_coupon(cart=cart)


@pytest.mark.django_db
def test_merge_guest_cart_sums_and_skips_unavailable():
    user = UserFactory()
    shared = ProductFactory(stock=10)
    scarce = ProductFactory(stock=1)
    hidden = ProductFactory(stock=5)

    user_cart = get_cart_for_user(user=user)
    add_item(cart=user_cart, product_id=shared.id, quantity=2)
    add_item(cart=user_cart, product_id=scarce.id, quantity=1)

    guest = get_cart_for_session(session_id="guest-1")
    add_item(cart=guest, product_id=shared.id, quantity=3)
    add_item(cart=guest, product_id=scarce.id, quantity=1)
    add_item(cart=guest, product_id=hidden.id, quantity=1)
    Product.objects.filter(pk=hidden.pk).update(status=Product.STATUS_DRAFT)

    merged = merge_guest_cart_to_user(session_id="guest-1", user=user)

    quantities = dict(merged.items.values_list("product_id", "quantity"))
    assert quantities == {shared.id: 5, scarce.id: 1}
    assert not Cart.objects.filter(session_id="guest-1").exists()


@pytest.mark.django_db
def test_merge_without_guest_cart_is_noop():
    user = UserFactory()
    cart = merge_guest_cart_to_user(session_id="nobody", user=user)
    assert cart.user_id == user.id


@pytest.mark.django_db
def test_cart_requires_exactly_one_owner():
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            Cart.objects.create(user=None, session_id=None)
