from rest_framework import serializers

from .models import Wishlist, WishlistItem


class WishlistItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(source="product.id", read_only=True)
    title = serializers.CharField(source="product.title", read_only=True)
    slug = serializers.CharField(source="product.slug", read_only=True)
    price = serializers.DecimalField(source="product.price", max_digits=12, decimal_places=2, read_only=True)
    image = serializers.CharField(source="product.primary_image", read_only=True, allow_null=True)
    in_stock = serializers.BooleanField(source="product.in_stock", read_only=True)
    average_rating = serializers.DecimalField(
        source="product.average_rating", max_digits=3, decimal_places=2, read_only=True
    )

    class Meta:
        model = WishlistItem
        fields = ["id", "product_id", "title", "slug", "price", "image", "in_stock", "average_rating", "added_at"]
        read_only_fields = fields


class WishlistSerializer(serializers.ModelSerializer):
    items = WishlistItemSerializer(many=True, read_only=True)

    class Meta:
        model = Wishlist
        fields = ["id", "items", "updated_at"]
        read_only_fields = fields


class WishlistProductSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
