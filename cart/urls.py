"""Cart URL routes (v1)."""

from django.urls import path

from .views import (
    CartAddItemView,
    CartClearView,
    CartCouponView,
    CartDetailView,
    CartItemView,
    GuestCartClearView,
    GuestCartItemView,
    GuestCartView,
    MergeGuestCartView,
)

app_name = "cart"

urlpatterns = [
    path("", CartDetailView.as_view(), name="cart-detail"),
    path("items/", CartAddItemView.as_view(), name="cart-add-item"),
    path("items/<int:item_id>/", CartItemView.as_view(), name="cart-item"),
    path("clear/", CartClearView.as_view(), name="cart-clear"),
    path("coupon/", CartCouponView.as_view(), name="cart-coupon"),
    # Guest cart routes
    path("guest/", GuestCartView.as_view(), name="guest-cart"),
    path("guest/items/<int:item_id>/", GuestCartItemView.as_view(), name="guest-cart-item"),
    path("guest/clear/", GuestCartClearView.as_view(), name="guest-cart-clear"),
    path("merge-guest/", MergeGuestCartView.as_view(), name="cart-merge-guest"),
]
