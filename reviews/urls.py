from django.urls import path

from .views import (
    AdminReviewApproveView,
    AdminReviewListView,
    ProductReviewListCreateView,
    ReviewDetailView,
    ReviewHelpfulView,
)

app_name = "reviews"

urlpatterns = [
    path("products/<int:product_id>/", ProductReviewListCreateView.as_view(), name="product-reviews"),
    path("<int:review_id>/", ReviewDetailView.as_view(), name="review-detail"),
    path("<int:review_id>/helpful/", ReviewHelpfulView.as_view(), name="review-helpful"),
    path("admin/all/", AdminReviewListView.as_view(), name="admin-review-list"),
    path("admin/<int:review_id>/approve/", AdminReviewApproveView.as_view(), name="admin-review-approve"),
]
