"""Read-only viewsets for the public catalog."""

from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, ScopedRateThrottle, UserRateThrottle

from . import selectors
from .models import Product
from .serializers import CategorySerializer, ProductDetailSerializer, ProductListSerializer


@extend_schema_view(
    list=extend_schema(
        summary="List categories",
        description="Returns active categories ordered by sort_order then name",
        tags=["Catalog Endpoints"],
    ),
    retrieve=extend_schema(
        summary="Get category by slug",
        description="Returns a single category by its slug",
        tags=["Catalog Endpoints"],
    ),
)
class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = CategorySerializer
    lookup_field = "slug"
    throttle_scope = "catalog"
    throttle_classes = [ScopedRateThrottle, UserRateThrottle, AnonRateThrottle]

    def get_queryset(self):
        return selectors.list_categories()

    @extend_schema(
        tags=["Catalog Endpoints"],
        summary="List products in category",
        description="Returns published products within a category by slug",
    )
    @action(detail=True, methods=["get"], url_path="products")
    def products(self, request, slug=None):
        qs = selectors.list_products(category_slug=slug, status=Product.STATUS_PUBLISHED)
        return Response(ProductListSerializer(qs, many=True).data)


class ProductFilterSet(filters.FilterSet):
    category = filters.CharFilter(field_name="categories__slug")
    featured = filters.BooleanFilter(field_name="is_featured")
    in_stock = filters.BooleanFilter(method="filter_in_stock")
    min_price = filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["category", "featured", "in_stock", "min_price", "max_price"]

    def filter_in_stock(self, queryset, name, value):
        return queryset.filter(stock__gt=0) if value else queryset.filter(stock=0)


@extend_schema_view(
    list=extend_schema(
        summary="List products",
        description=(
            "Returns published products. Supports filtering by `category`, `featured`, `in_stock` and price range, "
            "ordering by `title`, `price` or `created_at`, and search via `search`."
        ),
        tags=["Catalog Endpoints"],
        parameters=[
            OpenApiParameter("category", OpenApiTypes.STR, location="query", description="Filter by category slug"),
            OpenApiParameter("in_stock", OpenApiTypes.BOOL, location="query", description="Only in-stock products"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Search products by text"),
        ],
        examples=[
            OpenApiExample(
                "Product list",
                value={
                    "count": 1,
                    "next": None,
                    "previous": None,
                    "results": [
                        {
                            "id": 1,
                            "title": "Denim Jacket",
                            "slug": "denim-jacket",
                            "price": "25.00",
                            "compare_at_price": "40.00",
                            "discount_percentage": 38,
                            "primary_image": "/media/products/1/a1b2.jpg",
                            "in_stock": True,
                            "is_featured": False,
                            "average_rating": "4.50",
                            "review_count": 12,
                        }
                    ],
                },
                response_only=True,
            )
        ],
    ),
    retrieve=extend_schema(
        summary="Get product by slug",
        description="Returns a published product with categories and images",
        tags=["Catalog Endpoints"],
    ),
)
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"
    filterset_class = ProductFilterSet
    throttle_scope = "catalog"
    throttle_classes = [ScopedRateThrottle, UserRateThrottle, AnonRateThrottle]
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter, drf_filters.SearchFilter]
    ordering_fields = ["title", "price", "created_at"]
    search_fields = ["title", "description", "brand", "categories__name"]

    def get_queryset(self):
        return selectors.list_published_products()

    def get_serializer_class(self):
        return ProductDetailSerializer if self.action == "retrieve" else ProductListSerializer
