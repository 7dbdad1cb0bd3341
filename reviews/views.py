"""Review endpoints: public product reviews, owner edits, admin moderation."""

from catalog.selectors import get_published_product
from common.errors import NotFoundError
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import list_product_reviews, list_reviews
from .serializers import AdminReviewSerializer, HelpfulSerializer, ReviewSerializer, ReviewWriteSerializer
from .services import approve_review, create_review, delete_review, get_review, mark_helpful, update_review


class ReviewPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100


class ProductReviewListCreateView(generics.ListAPIView):
    """List approved reviews of a product (public) or review it (authenticated)."""

    serializer_class = ReviewSerializer
    pagination_class = ReviewPagination

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_throttles(self):
        self.throttle_scope = "reviews_write" if self.request.method == "POST" else "reviews"
        return super().get_throttles()

    def get_queryset(self):
        product_id = self.kwargs["product_id"]
        if get_published_product(product_id) is None:
            raise NotFoundError("Product not found")
        return list_product_reviews(product_id)

    @extend_schema(tags=["Reviews"], summary="List product reviews")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Reviews"],
        summary="Review product",
        description=(
            "One review per product. Reviews backed by a delivered order are verified and published at once; "
            "others wait for approval."
        ),
        request=ReviewWriteSerializer,
        responses={201: ReviewSerializer},
        examples=[
            OpenApiExample(
                "Review",
                value={"rating": 5, "title": "Sturdy", "comment": "Survived a year of daily use."},
                request_only=True,
            ),
        ],
    )
    def post(self, request, product_id: int):
        serializer = ReviewWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = create_review(user=request.user, product_id=product_id, **serializer.validated_data)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "reviews_write"

    @extend_schema(
        tags=["Reviews"],
        summary="Update own review",
        request=ReviewWriteSerializer(partial=True),
        responses={200: ReviewSerializer},
    )
    def patch(self, request, review_id: int):
        review = get_review(review_id, user=request.user)
        serializer = ReviewWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        return Response(ReviewSerializer(update_review(review, **serializer.validated_data)).data)

    @extend_schema(tags=["Reviews"], summary="Delete review", description="Owner or staff.", responses={204: None})
    def delete(self, request, review_id: int):
        delete_review(get_review(review_id), user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReviewHelpfulView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "reviews_write"

    @extend_schema(tags=["Reviews"], summary="Mark review helpful", request=None, responses={200: HelpfulSerializer})
    def post(self, request, review_id: int):
        review = mark_helpful(get_review(review_id))
        return Response(HelpfulSerializer(review).data)


class AdminReviewListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "reviews"
    serializer_class = AdminReviewSerializer
    pagination_class = ReviewPagination

    def get_queryset(self):
        raw = self.request.query_params.get("is_approved")
        is_approved = None if raw in (None, "") else raw.lower() in ("true", "1")
        return list_reviews(is_approved=is_approved)

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="List all reviews",
        parameters=[OpenApiParameter(name="is_approved", required=False, type=bool)],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminReviewApproveView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "reviews_write"

    @extend_schema(tags=["Admin Endpoints"], summary="Approve review", request=None, responses={200: ReviewSerializer})
    def put(self, request, review_id: int):
        return Response(ReviewSerializer(approve_review(get_review(review_id))).data)
