from rest_framework import serializers

from .models import Review


class ReviewerSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(source="display_name")


class ReviewSerializer(serializers.ModelSerializer):
    user = ReviewerSerializer(read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "product",
            "user",
            "rating",
            "title",
            "comment",
            "images",
            "is_verified_purchase",
            "is_approved",
            "helpful_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AdminReviewSerializer(ReviewSerializer):
    product_title = serializers.CharField(source="product.title", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(ReviewSerializer.Meta):
        fields = [*ReviewSerializer.Meta.fields, "product_title", "user_email"]
        read_only_fields = fields


class ReviewWriteSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(max_length=100, trim_whitespace=True)
    comment = serializers.CharField(max_length=1000)
    images = serializers.ListField(child=serializers.URLField(max_length=500), required=False, max_length=5)


class HelpfulSerializer(serializers.Serializer):
    helpful_count = serializers.IntegerField()
