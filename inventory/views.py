"""Admin-only inventory views: overview, ledger, manual and bulk adjustments."""

from common.choices import LogType, ReferenceType
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import list_logs
from .serializers import (
    BulkStockUpdateSerializer,
    InventoryLogSerializer,
    InventoryProductSerializer,
    InventoryStatsSerializer,
    StockAdjustmentResultSerializer,
    StockAdjustmentSerializer,
)
from .services import apply_adjustment, bulk_update, inventory_overview


class InventoryAdminMixin:
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "inventory_admin"


class InventoryOverviewView(InventoryAdminMixin, APIView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Inventory overview",
        description="Products with current stock plus aggregate stats. `low_stock=true` limits to low-stock items.",
        parameters=[
            OpenApiParameter("low_stock", bool, OpenApiParameter.QUERY),
            OpenApiParameter("search", str, OpenApiParameter.QUERY),
        ],
        examples=[
            OpenApiExample(
                "Overview",
                value={
                    "products": [{"id": 1, "title": "Mug", "stock": 3, "low_stock_threshold": 10, "in_stock": True}],
                    "stats": {"total_products": 1, "total_stock": 3, "low_stock_count": 1, "out_of_stock_count": 0},
                },
            )
        ],
    )
    def get(self, request):
        low_stock = str(request.query_params.get("low_stock", "")).lower() in ("1", "true", "yes")
        data = inventory_overview(low_stock=low_stock, search=request.query_params.get("search"))
        return Response(
            {
                "products": InventoryProductSerializer(data["products"], many=True).data,
                "stats": InventoryStatsSerializer(data["stats"]).data,
            }
        )


class InventoryLogListView(InventoryAdminMixin, generics.ListAPIView):
    serializer_class = InventoryLogSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List inventory ledger",
        description="Append-only stock ledger. Filters: product_id, type, reference_type, reference_id, created_after.",
        parameters=[
            OpenApiParameter("product_id", int, OpenApiParameter.QUERY),
            OpenApiParameter("type", str, OpenApiParameter.QUERY, enum=[c for c, _ in LogType.choices]),
            OpenApiParameter("reference_type", str, OpenApiParameter.QUERY, enum=[c for c, _ in ReferenceType.choices]),
            OpenApiParameter("reference_id", str, OpenApiParameter.QUERY),
            OpenApiParameter("created_after", str, OpenApiParameter.QUERY),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_logs(
            product_id=params.get("product_id"),
            log_type=params.get("type"),
            reference_type=params.get("reference_type"),
            reference_id=params.get("reference_id"),
            created_after=params.get("created_after"),
        )


class StockAdjustView(InventoryAdminMixin, APIView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust stock",
        description="`in` adds, `out` subtracts (never below zero), `adjustment` sets an absolute value.",
        request=StockAdjustmentSerializer,
        responses={200: StockAdjustmentResultSerializer},
        examples=[
            OpenApiExample(
                "Restock",
                value={"product_id": 1, "type": "in", "quantity": 20, "reason": "Supplier delivery"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = apply_adjustment(
            product_id=data["product_id"],
            adjustment_type=data["type"],
            quantity=data["quantity"],
            reason=data["reason"],
            performed_by=request.user,
        )
        return Response(StockAdjustmentResultSerializer(result).data, status=status.HTTP_200_OK)


class BulkStockUpdateView(InventoryAdminMixin, APIView):
    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Bulk set stock",
        description="Sets absolute stock per product. Each row reports its own result.",
        request=BulkStockUpdateSerializer,
        examples=[
            OpenApiExample(
                "Bulk",
                value={"updates": [{"product_id": 1, "stock": 40}, {"product_id": 2, "stock": 0}]},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = BulkStockUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = bulk_update(updates=serializer.validated_data["updates"], performed_by=request.user)
        return Response({"results": results}, status=status.HTTP_200_OK)


# EOF
