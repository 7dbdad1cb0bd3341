"""Serializers for the public catalog API."""

from rest_framework import serializers

from .models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "parent", "is_active", "sort_order"]


class ProductListSerializer(serializers.ModelSerializer):
    primary_image = serializers.CharField(read_only=True, allow_null=True)
    in_stock = serializers.BooleanField(read_only=True)
    discount_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "slug",
            "price",
            "compare_at_price",
            "discount_percentage",
            "primary_image",
            "in_stock",
            "is_featured",
            "average_rating",
            "review_count",
        ]


class ProductDetailSerializer(serializers.ModelSerializer):
    categories = CategorySerializer(many=True, read_only=True)
    in_stock = serializers.BooleanField(read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)
    discount_percentage = serializers.IntegerField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "slug",
            "sku",
            "description",
            "short_description",
            "brand",
            "status",
            "price",
            "compare_at_price",
            "discount_percentage",
            "stock",
            "in_stock",
            "is_low_stock",
            "images",
            "tags",
            "is_featured",
            "average_rating",
            "review_count",
            "categories",
        ]
