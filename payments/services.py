"""Payment services: intent creation and provider notification reconciliation.

A success notification marks the order paid and confirms it in one
transaction, so stock leaves the catalog exactly when payment lands.
Notifications may arrive twice or out of order; every write is guarded on
the state it expects, which makes redelivery a no-op.
"""

import json
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from common.choices import OrderStatus, PaymentStatus
from common.errors import InvalidSignatureError, InvalidTransitionError, NotFoundError, ValidationFailedError
from django.db import transaction
from django.utils import timezone
from orders.models import Order
from orders.services import confirm_order

from .gateway import PaymentGateway, get_gateway
from .gateway.port import FAILED_STATUSES, STATUS_SUCCEEDED, IntentResult

logger = logging.getLogger("storefront.payments")

EVENT_SUCCEEDED = "payment_intent.succeeded"
EVENT_FAILED = "payment_intent.payment_failed"
EVENT_CANCELED = "payment_intent.canceled"


def _log(level: int, event: str, **fields) -> None:
    try:
        logger.log(level, event, extra={"event": event, **fields})
    except Exception:
        # Logging should never break mutations
        pass


def to_minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def create_payment_intent(*, order: Order, gateway: Optional[PaymentGateway] = None) -> IntentResult:
    """Open a provider intent for the order total.

    The intent id is stored only after the provider answers, and only while
    the order is still pending and unpaid. A newer intent replaces the stored
    one; a success for the older intent is still matched through the
    `order_id` carried in the intent metadata.
    """

    gateway = gateway or get_gateway()
    order.refresh_from_db()
    if order.status != OrderStatus.PENDING or order.payment_status == PaymentStatus.PAID:
        raise InvalidTransitionError("Order is not awaiting payment")

    result = gateway.create_intent(
        to_minor_units(order.total),
        order.currency,
        {"order_id": str(order.id), "order_number": order.number, "user_id": str(order.user_id)},
    )
    updated = Order.objects.filter(
        pk=order.pk,
        status=OrderStatus.PENDING,
        payment_status__in=(PaymentStatus.PENDING, PaymentStatus.FAILED),
    ).update(payment_intent_id=result.intent_id, updated_at=timezone.now())
    if not updated:
        raise InvalidTransitionError("Order is not awaiting payment")
    order.refresh_from_db()
    _log(logging.INFO, "payment_intent_created", order_id=order.id, intent_id=result.intent_id)
    return result


def confirm_payment(
    *,
    intent_id: str,
    method_id: str,
    user=None,
    gateway: Optional[PaymentGateway] = None,
) -> tuple[Order, str]:
    """Confirm an intent with the provider and reconcile its outcome."""

    gateway = gateway or get_gateway()
    qs = Order.objects.filter(payment_intent_id=intent_id)
    if user is not None:
        qs = qs.filter(user=user)
    order = qs.first()
    if order is None:
        raise NotFoundError("Order not found")
    if order.payment_status == PaymentStatus.PAID:
        raise ValidationFailedError("Payment already confirmed", code="payment_already_confirmed")

    provider_status = gateway.confirm_intent(intent_id, method_id)
    if provider_status == STATUS_SUCCEEDED:
        record_payment_succeeded(intent_id, payment_method=method_id)
    elif provider_status in FAILED_STATUSES:
        record_payment_failed(intent_id)
    order.refresh_from_db()
    return order, provider_status


def handle_webhook(*, payload: bytes, signature: str, gateway: Optional[PaymentGateway] = None) -> dict:
    """Verify, parse and dispatch one provider notification.

    Unknown event types are acknowledged without side effects.
    """

    gateway = gateway or get_gateway()
    if not gateway.verify_webhook(payload, signature or ""):
        _log(logging.WARNING, "payment_webhook_rejected", reason="invalid_signature")
        raise InvalidSignatureError()

    try:
        event = json.loads(payload.decode("utf-8"))
        event_type = str(event["type"])
        obj = event.get("data", {}).get("object", {}) or {}
    except (ValueError, KeyError, AttributeError, TypeError):
        raise ValidationFailedError("Malformed webhook payload", code="malformed_webhook")
    intent_id = obj.get("id")
    _log(logging.INFO, "payment_event_received", event_id=event.get("id"), event_type=event_type, intent_id=intent_id)

    if event_type == EVENT_SUCCEEDED:
        if not intent_id:
            raise ValidationFailedError("Webhook event is missing the intent id", code="malformed_webhook")
        record_payment_succeeded(
            intent_id,
            payment_method=str(obj.get("payment_method") or ""),
            order_id=_metadata_order_id(obj),
        )
    elif event_type in (EVENT_FAILED, EVENT_CANCELED):
        if not intent_id:
            raise ValidationFailedError("Webhook event is missing the intent id", code="malformed_webhook")
        record_payment_failed(intent_id)
    else:
        _log(logging.INFO, "payment_event_ignored", event_type=event_type)
    return {"received": True}


def _metadata_order_id(obj: dict) -> Optional[int]:
    metadata = obj.get("metadata") or {}
    try:
        return int(metadata.get("order_id"))
    except (AttributeError, TypeError, ValueError):
        return None


@transaction.atomic
def record_payment_succeeded(
    intent_id: str,
    *,
    payment_method: str = "",
    order_id: Optional[int] = None,
) -> Optional[Order]:
    """Mark the order paid and confirm it.

    The order is found by its stored intent id, falling back to `order_id`
    from the intent metadata when a newer intent replaced the paid one. The
    paid intent then becomes the stored one.

    - pending order: paid and confirmed together; a stock shortfall rolls
      both back and propagates
    - already confirmed or later: payment recorded, stock untouched
    - cancelled: payment recorded, status kept, warning for manual refund
    - already paid through another intent: warning for manual refund
    - unknown intent: logged and acknowledged
    """

    order = Order.objects.select_for_update().filter(payment_intent_id=intent_id).first()
    superseded = False
    if order is None and order_id is not None:
        order = Order.objects.select_for_update().filter(pk=order_id).first()
        superseded = order is not None
    if order is None:
        _log(logging.WARNING, "payment_intent_unknown", intent_id=intent_id, outcome="succeeded")
        return None

    now = timezone.now()
    paid_fields = {"payment_status": PaymentStatus.PAID, "paid_at": now}
    if payment_method:
        paid_fields["payment_method"] = payment_method
    if superseded:
        if order.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            _log(
                logging.WARNING,
                "payment_duplicate_charge",
                order_id=order.id,
                order_number=order.number,
                intent_id=intent_id,
                paid_intent_id=order.payment_intent_id,
            )
            return order
        _log(
            logging.INFO,
            "payment_intent_superseded",
            order_id=order.id,
            intent_id=intent_id,
            replaced_by=order.payment_intent_id,
        )
        paid_fields["payment_intent_id"] = intent_id

    if order.status == OrderStatus.PENDING:
        order = confirm_order(order, extra_fields=paid_fields)
        _log(logging.INFO, "payment_succeeded", order_id=order.id, order_number=order.number, intent_id=intent_id)
        return order

    marked = (
        Order.objects.filter(pk=order.pk)
        .exclude(payment_status__in=(PaymentStatus.PAID, PaymentStatus.REFUNDED))
        .update(updated_at=now, **paid_fields)
    )
    order.refresh_from_db()
    if not marked:
        _log(logging.INFO, "payment_duplicate_ignored", order_id=order.id, intent_id=intent_id)
    elif order.status == OrderStatus.CANCELLED:
        _log(
            logging.WARNING,
            "payment_for_cancelled_order",
            order_id=order.id,
            order_number=order.number,
            intent_id=intent_id,
        )
    else:
        _log(logging.INFO, "payment_succeeded", order_id=order.id, order_number=order.number, intent_id=intent_id)
    return order


@transaction.atomic
def record_payment_failed(intent_id: str) -> Optional[Order]:
    """Mark payment failed while it has not succeeded; order status is unchanged."""

    updated = Order.objects.filter(
        payment_intent_id=intent_id,
        payment_status__in=(PaymentStatus.PENDING, PaymentStatus.FAILED),
    ).update(payment_status=PaymentStatus.FAILED, updated_at=timezone.now())
    order = Order.objects.filter(payment_intent_id=intent_id).first()
    if order is None:
        _log(logging.WARNING, "payment_intent_unknown", intent_id=intent_id, outcome="failed")
        return None
    if updated:
        _log(logging.INFO, "payment_failed", order_id=order.id, order_number=order.number, intent_id=intent_id)
    else:
        _log(logging.INFO, "payment_failure_ignored", order_id=order.id, payment_status=order.payment_status)
    return order


def get_payment_status(*, order_id: int, user) -> Order:
    try:
        return Order.objects.get(pk=order_id, user=user)
    except Order.DoesNotExist:
        raise NotFoundError("Order not found")
