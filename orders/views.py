"""Orders API endpoints: customer checkout, history and cancellation, plus
admin listing and state-machine control.
"""

from common.serializers import DateRangeQuerySerializer
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order
from .serializers import (
    AdminOrderSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusUpdateSerializer,
    OrderTrackingSerializer,
    OrderTrackSerializer,
)
from .services import (
    _get_order,
    add_tracking,
    cancel_order,
    compute_request_hash,
    create_order_from_cart,
    update_status,
    with_idempotency,
)

IDEMPOTENCY_HEADER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Makes the request idempotent within scope+path+method",
    type=str,
)

ORDER_EXAMPLE = OpenApiExample(
    "Order",
    value={
        "id": 123,
        "number": "ORD-20250101-48213",
        "status": "pending",
        "payment_status": "pending",
        "items": [
            {
                "id": 10,
                "product": 5,
                "name": "Ceramic mug",
                "image": "https://cdn.example.com/mug.jpg",
                "variant": "",
                "quantity": 2,
                "unit_price": "25.00",
                "line_total": "50.00",
            }
        ],
        "total_items": 2,
        "subtotal": "50.00",
        "shipping_cost": "0.00",
        "tax": "5.00",
        "discount": "0.00",
        "total": "55.00",
        "currency": "usd",
    },
    response_only=True,
)


def _run_idempotent(request, handler):
    """Wrap a `(body, code)` handler with `Idempotency-Key` replay when the header is present."""

    idem_key = request.headers.get("Idempotency-Key")
    if idem_key:
        body, code = with_idempotency(
            key=idem_key,
            user=request.user,
            path=str(request.path),
            method=str(request.method),
            request_hash=compute_request_hash(getattr(request, "data", None)),
            handler=handler,
        )
    else:
        body, code = handler()
    return Response(body, status=code)


class DefaultPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100


def _filter_created_range(qs, params):
    """Apply optional `start` / `end` bounds; malformed values are a 400."""

    bounds = DateRangeQuerySerializer(data=params)
    bounds.is_valid(raise_exception=True)
    if bounds.validated_data.get("start"):
        qs = qs.filter(created_at__gte=bounds.validated_data["start"])
    if bounds.validated_data.get("end"):
        qs = qs.filter(created_at__lte=bounds.validated_data["end"])
    return qs


class OrderListCreateView(generics.ListAPIView):
    """List the user's orders or create one from their cart.

    Filters:
    - `status`: one of the OrderStatus values
    - `number`: exact match of order number
    - `start` / `end`: ISO date or datetime bounds on `created_at`
    """

    permission_classes = [IsAuthenticated]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination

    def get_throttles(self):
        self.throttle_scope = "orders_write" if self.request.method == "POST" else "orders"
        return super().get_throttles()

    def get_queryset(self):
        qs = Order.objects.filter(user_id=self.request.user.id).order_by("-created_at", "-id").prefetch_related("items")
        order_status = self.request.query_params.get("status")
        if order_status:
            qs = qs.filter(status=order_status)
        number = self.request.query_params.get("number")
        if number:
            qs = qs.filter(number=number)
        return _filter_created_range(qs, self.request.query_params)

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        description="List current user's orders, newest first.",
        parameters=[
            OpenApiParameter(name="status", description="Order status filter", required=False, type=str),
            OpenApiParameter(name="number", description="Order number exact match", required=False, type=str),
            OpenApiParameter(name="start", description="Created at or after (ISO date/time)", required=False, type=str),
            OpenApiParameter(name="end", description="Created at or before (ISO date/time)", required=False, type=str),
            OpenApiParameter(name="page", description="Page number", required=False, type=int),
            OpenApiParameter(name="page_size", description="Items per page", required=False, type=int),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Create order",
        description=(
            "Creates a pending order from the cart. Every line is re-checked against stock and priced from the "
            "live catalog; tax and shipping are computed server side. The cart is emptied. Stock is only taken "
            "when payment confirms the order."
        ),
        parameters=[IDEMPOTENCY_HEADER],
        request=OrderCreateSerializer,
        responses={201: OrderSerializer},
        examples=[
            OpenApiExample(
                "Checkout",
                value={
                    "shipping_address": {
                        "street": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                        "country": "US",
                        "phone": "+15555550100",
                    },
                    "notes": "Leave at the door",
                },
                request_only=True,
            ),
            ORDER_EXAMPLE,
        ],
    )
    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        def _handler():
            order = create_order_from_cart(
                user=request.user,
                shipping_address=dict(data["shipping_address"]),
                billing_address=dict(data["billing_address"]) if data.get("billing_address") else None,
                notes=data.get("notes", ""),
            )
            return OrderSerializer(order).data, status.HTTP_201_CREATED

        return _run_idempotent(request, _handler)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"], summary="Get order detail", responses={200: OrderSerializer}, examples=[ORDER_EXAMPLE]
    )
    def get(self, request, order_id: int):
        order = _get_order(order_id, user=request.user)
        return Response(OrderSerializer(order).data)


class OrderTrackView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "orders"

    @extend_schema(
        tags=["Orders"],
        summary="Track order",
        description="Status and tracking number only.",
        responses={200: OrderTrackSerializer},
    )
    def get(self, request, order_id: int):
        order = _get_order(order_id, user=request.user)
        return Response(OrderTrackSerializer(order).data)


class OrderCancelView(APIView):
    """Cancel an order for the authenticated owner.

    Idempotent when `Idempotency-Key` is provided. Returns 409 on key reuse with different payload.
    """

    permission_classes = [IsAuthenticated]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Orders"],
        summary="Cancel order",
        description=(
            "Cancels the order unless it is already cancelled, delivered or refunded. "
            "Stock is restored when the order had been confirmed."
        ),
        parameters=[IDEMPOTENCY_HEADER],
        request=None,
        responses={200: OrderSerializer},
        examples=[
            OpenApiExample("Cancelled", value={"id": 1, "status": "cancelled"}, response_only=True),
            OpenApiExample(
                "Not allowed",
                value={"detail": "Cannot cancel an order that is delivered", "code": "invalid_transition"},
                response_only=True,
                status_codes=["400"],
            ),
        ],
    )
    def post(self, request, order_id: int):
        order = _get_order(order_id, user=request.user)

        def _handler():
            updated = cancel_order(order, performed_by=request.user, reason="cancelled by customer")
            return OrderSerializer(updated).data, status.HTTP_200_OK

        return _run_idempotent(request, _handler)


class AdminOrderListView(generics.ListAPIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "orders"
    serializer_class = AdminOrderSerializer
    pagination_class = DefaultPagination

    def get_queryset(self):
        qs = Order.objects.select_related("user").prefetch_related("items").order_by("-created_at", "-id")
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("payment_status"):
            qs = qs.filter(payment_status=params["payment_status"])
        if params.get("number"):
            qs = qs.filter(number=params["number"])
        return _filter_created_range(qs, params)

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="List all orders",
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="payment_status", required=False, type=str),
            OpenApiParameter(name="number", required=False, type=str),
            OpenApiParameter(name="start", required=False, type=str),
            OpenApiParameter(name="end", required=False, type=str),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminOrderStatusView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Update order status",
        description=(
            "Drives the order state machine: pending -> confirmed -> processing -> shipped -> delivered, "
            "cancelled from any non-terminal state, refunded once paid. Out-of-order moves return 400."
        ),
        request=OrderStatusUpdateSerializer,
        responses={200: AdminOrderSerializer},
        examples=[OpenApiExample("Ship", value={"status": "shipped"}, request_only=True)],
    )
    def put(self, request, order_id: int):
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(order_id)
        updated = update_status(order, serializer.validated_data["status"], performed_by=request.user)
        return Response(AdminOrderSerializer(updated).data)


class AdminOrderTrackingView(APIView):
    permission_classes = [IsAdminUser]
    throttle_scope = "orders_write"

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Add tracking number",
        request=OrderTrackingSerializer,
        responses={200: AdminOrderSerializer},
    )
    def put(self, request, order_id: int):
        serializer = OrderTrackingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = add_tracking(_get_order(order_id), serializer.validated_data["tracking_number"])
        return Response(AdminOrderSerializer(order).data)
