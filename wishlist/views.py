"""Wishlist API for the authenticated user."""

from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import WishlistProductSerializer, WishlistSerializer
from .services import add_product, clear_wishlist, get_wishlist, move_to_cart, remove_product, wishlist_with_items


def _render(wishlist, code=status.HTTP_200_OK) -> Response:
    return Response(WishlistSerializer(wishlist_with_items(wishlist)).data, status=code)


class WishlistView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "wishlist"

    @extend_schema(tags=["Wishlist"], summary="Get wishlist", responses={200: WishlistSerializer})
    def get(self, request):
        return _render(get_wishlist(user=request.user))

    @extend_schema(tags=["Wishlist"], summary="Clear wishlist", responses={200: WishlistSerializer})
    def delete(self, request):
        return _render(clear_wishlist(user=request.user))


class WishlistItemsView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "wishlist"

    @extend_schema(
        tags=["Wishlist"],
        summary="Add product to wishlist",
        description="201 when added, 200 when the product was already there.",
        request=WishlistProductSerializer,
        responses={200: WishlistSerializer, 201: WishlistSerializer},
        examples=[OpenApiExample("Add", value={"product_id": 100}, request_only=True)],
    )
    def post(self, request):
        serializer = WishlistProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        wishlist, created = add_product(user=request.user, product_id=serializer.validated_data["product_id"])
        return _render(wishlist, status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class WishlistItemView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "wishlist"

    @extend_schema(tags=["Wishlist"], summary="Remove product from wishlist", responses={200: WishlistSerializer})
    def delete(self, request, product_id: int):
        return _render(remove_product(user=request.user, product_id=product_id))


class WishlistMoveToCartView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "wishlist"

    @extend_schema(
        tags=["Wishlist"],
        summary="Move product to cart",
        description="Adds one unit to the cart (summing with an existing line) and removes it from the wishlist.",
        request=WishlistProductSerializer,
        responses={200: WishlistSerializer},
    )
    def post(self, request):
        serializer = WishlistProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return _render(move_to_cart(user=request.user, product_id=serializer.validated_data["product_id"]))
