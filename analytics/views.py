"""Admin-only analytics endpoints."""

from common.serializers import DateRangeQuerySerializer
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    CustomerStatsSerializer,
    DashboardQuerySerializer,
    DashboardSerializer,
    ProductPerformanceSerializer,
    ProductsQuerySerializer,
    SalesPointSerializer,
    SalesQuerySerializer,
)
from .services import customer_stats, dashboard, product_performance, sales_series

RANGE_PARAMS = [
    OpenApiParameter(name="start", description="Created at >= start (ISO)", required=False, type=str),
    OpenApiParameter(name="end", description="Created at <= end (ISO)", required=False, type=str),
]


class AnalyticsAdminMixin:
    permission_classes = [IsAdminUser]
    throttle_scope = "analytics"


def _query(serializer_class, request) -> dict:
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class DashboardView(AnalyticsAdminMixin, APIView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Analytics dashboard",
        description="Order count, revenue, average order value, customers and top products for a period.",
        parameters=[OpenApiParameter(name="period", enum=["today", "week", "month", "year", "all"], required=False)],
        responses={200: DashboardSerializer},
    )
    def get(self, request):
        params = _query(DashboardQuerySerializer, request)
        return Response(DashboardSerializer(dashboard(period=params["period"])).data)


class SalesView(AnalyticsAdminMixin, APIView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Sales series",
        parameters=[OpenApiParameter(name="group_by", enum=["day", "week", "month"], required=False), *RANGE_PARAMS],
        responses={200: SalesPointSerializer(many=True)},
    )
    def get(self, request):
        params = _query(SalesQuerySerializer, request)
        series = sales_series(group_by=params["group_by"], start=params.get("start"), end=params.get("end"))
        return Response({"group_by": params["group_by"], "sales": SalesPointSerializer(series, many=True).data})


class ProductAnalyticsView(AnalyticsAdminMixin, APIView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Product performance",
        parameters=[
            OpenApiParameter(name="sort_by", enum=["revenue", "sales"], required=False),
            OpenApiParameter(name="limit", type=int, required=False),
        ],
        responses={200: ProductPerformanceSerializer(many=True)},
    )
    def get(self, request):
        params = _query(ProductsQuerySerializer, request)
        rows = product_performance(sort_by=params["sort_by"], limit=params["limit"])
        return Response({"products": ProductPerformanceSerializer(rows, many=True).data})


class CustomerAnalyticsView(AnalyticsAdminMixin, APIView):
    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Customer statistics",
        parameters=RANGE_PARAMS,
        responses={200: CustomerStatsSerializer},
    )
    def get(self, request):
        params = _query(DateRangeQuerySerializer, request)
        stats = customer_stats(start=params.get("start"), end=params.get("end"))
        return Response(CustomerStatsSerializer(stats).data)
