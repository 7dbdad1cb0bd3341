"""Wishlist models: one list per user holding unique products."""

from django.conf import settings
from django.db import models


class Wishlist(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, related_name="wishlist", on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover
        return f"Wishlist user={self.user_id}"


class WishlistItem(models.Model):
    wishlist = models.ForeignKey(Wishlist, related_name="items", on_delete=models.CASCADE)
    product = models.ForeignKey("catalog.Product", related_name="wishlist_items", on_delete=models.CASCADE)
    added_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-added_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["wishlist", "product"], name="uniq_wishlist_product"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"WishlistItem wishlist={self.wishlist_id} product={self.product_id}"
