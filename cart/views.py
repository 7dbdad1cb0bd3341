"""DRF views for cart operations.

User carts are resolved from the authenticated user; guest carts from the
`X-Session-Id` header.
"""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .selectors import cart_with_items, get_cart_for_session, get_cart_for_user
from .serializers import AddItemSerializer, ApplyCouponSerializer, CartReadSerializer, UpdateItemQuantitySerializer
from .services import (
    add_item,
    apply_coupon,
    clear_cart,
    merge_guest_cart_to_user,
    remove_coupon,
    remove_item,
    update_item_quantity,
)

SESSION_HEADER = OpenApiParameter(
    name="X-Session-Id",
    location=OpenApiParameter.HEADER,
    required=True,
    description="Guest session identifier",
    type=str,
)

CART_EXAMPLE = OpenApiExample(
    "Cart",
    value={
        "id": 1,
        "items": [
            {
                "id": 10,
                "product_id": 100,
                "title": "Ceramic mug",
                "image": "https://cdn.example.com/mug.jpg",
                "variant": "",
                "quantity": 2,
                "unit_price": "25.00",
                "line_total": "50.00",
                "stock": 10,
            }
        ],
        "total_items": 2,
        "subtotal": "50.00",
        "coupon_code": "",
        "coupon_discount": "0.00",
        "total": "50.00",
    },
    response_only=True,
)


def _render(cart, code=status.HTTP_200_OK) -> Response:
    return Response(CartReadSerializer(cart_with_items(cart)).data, status=code)


def _session_id(request) -> str | None:
    value = (request.headers.get("X-Session-Id") or "").strip()
    return value[:64] or None


def _missing_session() -> Response:
    return Response({"detail": "Missing X-Session-Id.", "code": "missing_session"}, status=status.HTTP_400_BAD_REQUEST)


class CartDetailView(APIView):
    """Return the authenticated user's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the authenticated user's cart including items and totals. Created on first access.",
        responses={200: CartReadSerializer},
        examples=[CART_EXAMPLE],
    )
    def get(self, request):
        return _render(get_cart_for_user(user=request.user))


class CartAddItemView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description="Adds a product; an existing line for the same product and variant has its quantity summed.",
        request=AddItemSerializer,
        responses={201: CartReadSerializer},
        examples=[OpenApiExample("Add", value={"product_id": 100, "quantity": 2}, request_only=True), CART_EXAMPLE],
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_cart_for_user(user=request.user)
        add_item(cart=cart, **serializer.validated_data)
        return _render(cart, status.HTTP_201_CREATED)


class CartItemView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        request=UpdateItemQuantitySerializer,
        responses={200: CartReadSerializer},
    )
    def patch(self, request, item_id: int):
        serializer = UpdateItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_cart_for_user(user=request.user)
        update_item_quantity(cart=cart, item_id=item_id, quantity=serializer.validated_data["quantity"])
        return _render(cart)

    @extend_schema(tags=["Cart Endpoints"], summary="Remove cart item", responses={200: CartReadSerializer})
    def delete(self, request, item_id: int):
        cart = get_cart_for_user(user=request.user)
        remove_item(cart=cart, item_id=item_id)
        return _render(cart)


class CartClearView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear cart",
        description="Deletes all items and removes any applied coupon.",
        request=None,
        responses={200: CartReadSerializer},
    )
    def post(self, request):
        cart = get_cart_for_user(user=request.user)
        clear_cart(cart=cart)
        return _render(cart)


class CartCouponView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Apply coupon",
        description="Validates the code against the cart subtotal and stores the resulting discount.",
        request=ApplyCouponSerializer,
        responses={200: CartReadSerializer},
        examples=[OpenApiExample("Apply", value={"code": "SAVE20"}, request_only=True)],
    )
    def post(self, request):
        serializer = ApplyCouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_cart_for_user(user=request.user)
        apply_coupon(cart=cart, code=serializer.validated_data["code"])
        return _render(cart)

    @extend_schema(tags=["Cart Endpoints"], summary="Remove coupon", responses={200: CartReadSerializer})
    def delete(self, request):
        cart = get_cart_for_user(user=request.user)
        remove_coupon(cart=cart)
        return _render(cart)


class GuestCartView(APIView):
    """Guest cart keyed by `X-Session-Id`."""

    permission_classes = [AllowAny]
    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get guest cart",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer},
        examples=[CART_EXAMPLE],
    )
    def get(self, request):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        return _render(get_cart_for_session(session_id=session_id))

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to guest cart",
        parameters=[SESSION_HEADER],
        request=AddItemSerializer,
        responses={201: CartReadSerializer},
    )
    def post(self, request):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_cart_for_session(session_id=session_id)
        add_item(cart=cart, **serializer.validated_data)
        return _render(cart, status.HTTP_201_CREATED)


class GuestCartItemView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update guest cart item quantity",
        parameters=[SESSION_HEADER],
        request=UpdateItemQuantitySerializer,
        responses={200: CartReadSerializer},
    )
    def patch(self, request, item_id: int):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        serializer = UpdateItemQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_cart_for_session(session_id=session_id)
        update_item_quantity(cart=cart, item_id=item_id, quantity=serializer.validated_data["quantity"])
        return _render(cart)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove guest cart item",
        parameters=[SESSION_HEADER],
        responses={200: CartReadSerializer},
    )
    def delete(self, request, item_id: int):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        cart = get_cart_for_session(session_id=session_id)
        remove_item(cart=cart, item_id=item_id)
        return _render(cart)


class GuestCartClearView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Clear guest cart",
        parameters=[SESSION_HEADER],
        request=None,
        responses={200: CartReadSerializer},
    )
    def post(self, request):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        cart = get_cart_for_session(session_id=session_id)
        clear_cart(cart=cart)
        return _render(cart)


class MergeGuestCartView(APIView):
    """Authenticated endpoint to merge a guest cart into the user's cart."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "cart_write"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Merge guest cart into user cart",
        description="Sums quantities of matching lines; unavailable products are skipped. The guest cart is deleted.",
        parameters=[SESSION_HEADER],
        request=None,
        responses={200: CartReadSerializer},
    )
    def post(self, request):
        session_id = _session_id(request)
        if not session_id:
            return _missing_session()
        cart = merge_guest_cart_to_user(session_id=session_id, user=request.user)
        return _render(cart)
