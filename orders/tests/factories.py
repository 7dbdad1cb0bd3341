from cart.selectors import get_cart_for_user
from cart.services import add_item
from orders.services import create_order_from_cart

ADDRESS = {
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "country": "US",
    "phone": "+15555550100",
}


def place_order(user, *lines, **kwargs):
    """Fill the user's cart with `(product, quantity)` lines and check out."""

    cart = get_cart_for_user(user=user)
    for product, quantity in lines:
        add_item(cart=cart, product_id=product.id, quantity=quantity)
    return create_order_from_cart(user=user, shipping_address=kwargs.pop("shipping_address", ADDRESS), **kwargs)
