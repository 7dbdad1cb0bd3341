"""Coupon endpoints: customer validation and admin CRUD."""

from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view
from rest_framework import permissions, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Coupon
from .serializers import CouponAdminSerializer, CouponValidateResultSerializer, CouponValidateSerializer
from .services import validate_coupon


class CouponValidateView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    throttle_scope = "coupons"

    @extend_schema(
        tags=["Coupon Endpoints"],
        summary="Validate coupon",
        description="Checks a code against a cart total and returns the discount it would give. Read-only.",
        request=CouponValidateSerializer,
        responses={200: CouponValidateResultSerializer},
        examples=[
            OpenApiExample("Request", value={"code": "SAVE20", "cart_total": "100.00"}, request_only=True),
            OpenApiExample(
                "Response",
                value={
                    "code": "SAVE20",
                    "type": "percentage",
                    "value": "20.00",
                    "discount": "15.00",
                    "min_order_amount": "0.00",
                },
                response_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = CouponValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        coupon, discount = validate_coupon(
            code=serializer.validated_data["code"], cart_total=serializer.validated_data["cart_total"]
        )
        data = {
            "code": coupon.code,
            "type": coupon.type,
            "value": coupon.value,
            "discount": discount,
            "min_order_amount": coupon.min_order_amount,
        }
        return Response(CouponValidateResultSerializer(data).data)


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List coupons"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get coupon"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create coupon"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update coupon"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update coupon"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete coupon"),
)
class CouponAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [permissions.IsAdminUser]
    throttle_scope = "coupons"
    queryset = Coupon.objects.all().order_by("-created_at")
    serializer_class = CouponAdminSerializer
    search_fields = ["code", "description"]
    filterset_fields = ["type", "is_active"]
