"""Payments API: intent creation, confirmation, provider webhook and status."""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from orders.services import _get_order
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    ConfirmPaymentSerializer,
    ConfirmResultSerializer,
    CreateIntentSerializer,
    IntentSerializer,
    PaymentStatusSerializer,
)
from .services import confirm_payment, create_payment_intent, get_payment_status, handle_webhook
from .signing import SIGNATURE_HEADER


class CreatePaymentIntentView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(
        tags=["Payments"],
        summary="Create payment intent",
        description="Opens a provider payment intent for the full total of one of the caller's pending orders.",
        request=CreateIntentSerializer,
        responses={201: IntentSerializer},
        examples=[
            OpenApiExample("Request", value={"order_id": 123}, request_only=True),
            OpenApiExample(
                "Intent",
                value={
                    "payment_intent_id": "pi_3Nx",
                    "client_secret": "pi_3Nx_secret_abc",
                    "amount": 5500,
                    "currency": "usd",
                    "status": "requires_payment_method",
                },
                response_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = CreateIntentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _get_order(serializer.validated_data["order_id"], user=request.user)
        intent = create_payment_intent(order=order)
        body = {
            "payment_intent_id": intent.intent_id,
            "client_secret": intent.client_secret,
            "amount": intent.amount,
            "currency": intent.currency,
            "status": intent.status,
        }
        return Response(IntentSerializer(body).data, status=status.HTTP_201_CREATED)


class ConfirmPaymentView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(
        tags=["Payments"],
        summary="Confirm payment",
        description=(
            "Confirms the intent with the provider. A succeeded payment marks the order paid and confirms it, "
            "moving its stock out of the catalog."
        ),
        request=ConfirmPaymentSerializer,
        responses={200: ConfirmResultSerializer},
    )
    def post(self, request):
        serializer = ConfirmPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order, provider_status = confirm_payment(
            intent_id=data["payment_intent_id"],
            method_id=data["payment_method_id"],
            user=request.user,
        )
        body = {
            "payment_intent_id": data["payment_intent_id"],
            "status": provider_status,
            "order_id": order.id,
            "order_status": order.status,
            "payment_status": order.payment_status,
        }
        return Response(ConfirmResultSerializer(body).data)


class PaymentWebhookView(APIView):
    """Provider notifications. Authenticated by payload signature, not by user."""

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "payments_webhook"

    @extend_schema(
        tags=["Payments"],
        summary="Payment webhook",
        description=(
            f"Raw JSON event signed with HMAC-SHA256 in the `{SIGNATURE_HEADER}` header "
            "(`t=<timestamp>,v1=<hex>`). Handles `payment_intent.succeeded`, "
            "`payment_intent.payment_failed` and `payment_intent.canceled`; other events are acknowledged."
        ),
        parameters=[
            OpenApiParameter(name=SIGNATURE_HEADER, location=OpenApiParameter.HEADER, required=True, type=str)
        ],
        request={"application/json": {"type": "object"}},
        responses={200: {"type": "object", "properties": {"received": {"type": "boolean"}}}},
        examples=[
            OpenApiExample(
                "Succeeded",
                value={"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {"id": "pi_3Nx"}}},
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        # Signature is computed over the exact bytes received
        result = handle_webhook(payload=request.body, signature=request.headers.get(SIGNATURE_HEADER, ""))
        return Response(result)


class PaymentStatusView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "payments"

    @extend_schema(tags=["Payments"], summary="Payment status", responses={200: PaymentStatusSerializer})
    def get(self, request, order_id: int):
        order = get_payment_status(order_id=order_id, user=request.user)
        return Response(PaymentStatusSerializer(order).data)
