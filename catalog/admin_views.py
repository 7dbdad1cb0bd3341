"""Admin viewsets for write endpoints in the catalog app.

Endpoints are restricted to staff users and use scoped throttling.
"""

from common.errors import ConflictError
from django.db.models import ProtectedError
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from .admin_serializers import (
    CategoryAdminSerializer,
    ProductAdminSerializer,
    ProductImageDeleteSerializer,
    ProductImageUploadSerializer,
)
from .models import Category, Product
from .services import add_product_image, remove_product_image


class AdminBaseViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "catalog_admin_write"


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List categories (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get category (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create category"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update category"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update category"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete category"),
)
class CategoryAdminViewSet(AdminBaseViewSet):
    queryset = Category.objects.all().order_by("sort_order", "name")
    serializer_class = CategoryAdminSerializer


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create product"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update product"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete product"),
)
class ProductAdminViewSet(AdminBaseViewSet):
    queryset = Product.objects.all().prefetch_related("categories").order_by("title")
    serializer_class = ProductAdminSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    search_fields = ["title", "sku", "slug"]
    filterset_fields = ["status", "is_featured"]

    def perform_destroy(self, instance):
        # Ledger entries reference the product and are never deleted
        try:
            instance.delete()
        except ProtectedError:
            raise ConflictError("Product has inventory history; set it to draft instead of deleting it.")

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Upload product image",
        description="Uploads an image to the asset store and appends its URL to the product.",
        request=ProductImageUploadSerializer,
        responses={201: ProductAdminSerializer},
    )
    @action(detail=True, methods=["post"], url_path="images")
    def upload_image(self, request, pk=None):
        product = self.get_object()
        serializer = ProductImageUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = add_product_image(product=product, file=serializer.validated_data["image"])
        return Response(ProductAdminSerializer(updated).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Remove product image",
        description="Detaches an image URL from the product and deletes the asset in the background.",
        request=ProductImageDeleteSerializer,
        responses={200: ProductAdminSerializer},
    )
    @upload_image.mapping.delete
    def delete_image(self, request, pk=None):
        product = self.get_object()
        serializer = ProductImageDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = remove_product_image(product=product, url=serializer.validated_data["url"])
        return Response(ProductAdminSerializer(updated).data, status=status.HTTP_200_OK)
