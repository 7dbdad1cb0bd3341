from django.urls import path

from .views import WishlistItemsView, WishlistItemView, WishlistMoveToCartView, WishlistView

app_name = "wishlist"

urlpatterns = [
    path("", WishlistView.as_view(), name="wishlist"),
    path("items/", WishlistItemsView.as_view(), name="wishlist-items"),
    path("items/<int:product_id>/", WishlistItemView.as_view(), name="wishlist-item"),
    path("move-to-cart/", WishlistMoveToCartView.as_view(), name="wishlist-move-to-cart"),
]
