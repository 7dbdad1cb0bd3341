"""Order services: creation from cart and the order state machine.

Stock moves at two points only: `confirm_order` takes it out of the catalog
and `cancel_order` puts it back when the order had been confirmed. Status
changes use a guarded UPDATE (`filter(status=expected)`) so concurrent
deliveries of the same transition apply its side effects once.
"""

import hashlib
import json
import logging
import random
from datetime import timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Callable, Optional, Tuple

from cart.models import Cart, CartItem
from catalog.models import Product
from common.choices import LogType, OrderStatus, PaymentStatus, ReferenceType
from common.errors import ConflictError, EmptyCartError, InvalidTransitionError, NotFoundError, OutOfStockError
from coupons.services import consume_coupon, validate_coupon
from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from inventory.services import adjust_stock

from .emails import send_order_cancelled_email, send_order_confirmed_email, send_order_shipped_email
from .models import IdempotencyKey, Order, OrderItem
from .pricing import compute_totals, money

logger = logging.getLogger("storefront.orders")

# Forward transitions and the single status each one requires
PRECURSORS = {
    OrderStatus.CONFIRMED: OrderStatus.PENDING,
    OrderStatus.PROCESSING: OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED: OrderStatus.PROCESSING,
    OrderStatus.DELIVERED: OrderStatus.SHIPPED,
}
NON_CANCELLABLE = (OrderStatus.CANCELLED, OrderStatus.DELIVERED, OrderStatus.REFUNDED)
REFUNDABLE = (OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED)


def _log_status_change(order: Order, prev: str, new: str, **fields) -> None:
    try:
        logger.info(
            "order_status_changed",
            extra={
                "event": "order_status_changed",
                "order_id": order.id,
                "order_number": order.number,
                "user_id": order.user_id,
                "status_from": prev,
                "status_to": new,
                **fields,
            },
        )
    except Exception:
        # Logging should never break mutations
        pass


def _notify(fn, order: Order) -> None:
    """Send a customer email once the surrounding transaction commits."""

    def _send():
        try:
            fn(order)
        except Exception:
            logger.warning("order_email_failed", extra={"event": "order_email_failed", "order_id": order.id})

    transaction.on_commit(_send)


def generate_order_number(now=None) -> str:
    """`ORD-<UTC YYYYMMDD>-<5 digits>`; uniqueness is enforced by the database."""

    now = now or timezone.now()
    return f"ORD-{now.astimezone(dt_timezone.utc).strftime('%Y%m%d')}-{random.randint(10000, 99999)}"


def _get_order(order_id: int, *, user=None, lock: bool = False) -> Order:
    qs = Order.objects.select_for_update() if lock else Order.objects.all()
    if user is not None:
        qs = qs.filter(user=user)
    try:
        return qs.get(pk=order_id)
    except Order.DoesNotExist:
        raise NotFoundError("Order not found")


def _guarded_update(order: Order, *, expected: str, target: str, **fields) -> bool:
    now = timezone.now()
    updated = Order.objects.filter(pk=order.pk, status=expected).update(status=target, updated_at=now, **fields)
    return bool(updated)


@transaction.atomic
def create_order_from_cart(
    *,
    user,
    shipping_address: dict,
    billing_address: Optional[dict] = None,
    notes: str = "",
) -> Order:
    """Create a pending order from the user's cart.

    Every line is re-checked against current stock; one short line fails
    the whole order. Prices are snapshotted from the live catalog. No stock
    moves here. A cart coupon is re-validated against the order subtotal and
    consumed. The cart is emptied.
    """

    cart, _ = Cart.objects.get_or_create(user=user)
    cart = Cart.objects.select_for_update().get(pk=cart.pk)
    items = list(CartItem.objects.filter(cart=cart).order_by("id"))
    if not items:
        raise EmptyCartError("Cart is empty")

    products = Product.objects.in_bulk([item.product_id for item in items])
    lines = []
    for item in items:
        product = products.get(item.product_id)
        if product is None or product.status != Product.STATUS_PUBLISHED or product.stock < item.quantity:
            raise OutOfStockError(product.title if product else "Unknown")
        unit_price = money(product.price)
        lines.append(
            OrderItem(
                product=product,
                name=product.title,
                image=product.primary_image or "",
                variant=item.variant,
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=money(unit_price * item.quantity),
            )
        )

    subtotal = sum((line.line_total for line in lines), Decimal("0.00"))
    discount = Decimal("0")
    if cart.coupon_code:
        # Coupon is re-checked against live prices; a lapsed coupon fails checkout
        _, discount = validate_coupon(code=cart.coupon_code, cart_total=subtotal)
        consume_coupon(cart.coupon_code)
    totals = compute_totals(subtotal=subtotal, discount=discount)

    order = None
    max_attempts = int(getattr(settings, "ORDER_NUMBER_MAX_ATTEMPTS", 5))
    for _attempt in range(max_attempts):
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    user=user,
                    number=generate_order_number(),
                    email=getattr(user, "email", "") or "",
                    currency=getattr(settings, "STORE_CURRENCY", "usd"),
                    shipping_address=shipping_address,
                    billing_address=billing_address or shipping_address,
                    coupon_code=cart.coupon_code,
                    notes=notes or "",
                    **totals,
                )
            break
        except IntegrityError:
            logger.warning("order_number_collision", extra={"event": "order_number_collision", "user_id": user.id})
    if order is None:
        raise ConflictError("Could not allocate an order number. Please retry.")

    for line in lines:
        line.order = order
    OrderItem.objects.bulk_create(lines)

    CartItem.objects.filter(cart=cart).delete()
    Cart.objects.filter(pk=cart.pk).update(coupon_code="", coupon_discount=Decimal("0.00"))

    try:
        logger.info(
            "order_created",
            extra={
                "event": "order_created",
                "order_id": order.id,
                "order_number": order.number,
                "user_id": user.id,
                "total": str(order.total),
                "lines": len(lines),
            },
        )
    except Exception:
        pass
    return order


@transaction.atomic
def confirm_order(order: Order, *, performed_by=None, extra_fields: Optional[dict] = None) -> Order:
    """Drive `pending -> confirmed` and take the order's stock out of the catalog.

    A no-op when the order is already confirmed or further along, so duplicate
    payment notifications never decrement twice. Any line short on stock
    raises `InsufficientStockError` and rolls the whole transition back,
    including `extra_fields` written alongside the status.
    """

    now = timezone.now()
    fields = {"confirmed_at": now, **(extra_fields or {})}
    if not _guarded_update(order, expected=OrderStatus.PENDING, target=OrderStatus.CONFIRMED, **fields):
        order.refresh_from_db()
        if order.status in Order.STOCK_COMMITTED_STATUSES:
            return order
        raise InvalidTransitionError(f"Cannot confirm an order that is {order.status}")

    for item in order.items.all().order_by("id"):
        if item.product_id is None:
            raise OutOfStockError(item.name)
        adjust_stock(
            product_id=item.product_id,
            delta=-int(item.quantity),
            log_type=LogType.OUT,
            reason=f"Order {order.number} confirmed",
            reference_type=ReferenceType.ORDER,
            reference_id=str(order.id),
            performed_by=performed_by,
        )

    order.refresh_from_db()
    _log_status_change(order, OrderStatus.PENDING, OrderStatus.CONFIRMED)
    _notify(send_order_confirmed_email, order)
    return order


@transaction.atomic
def advance_status(order: Order, target: str) -> Order:
    """Move along the fulfilment path; only the exact precursor is accepted."""

    expected = PRECURSORS.get(target)
    if expected is None or target == OrderStatus.CONFIRMED:
        raise InvalidTransitionError(f"Cannot move an order to {target} this way")
    if not _guarded_update(order, expected=expected, target=target):
        order.refresh_from_db()
        raise InvalidTransitionError(f"Order must be {expected} before it can be {target} (currently {order.status})")
    order.refresh_from_db()
    _log_status_change(order, expected, target)
    if target == OrderStatus.SHIPPED:
        _notify(send_order_shipped_email, order)
    return order


@transaction.atomic
def cancel_order(order: Order, *, performed_by=None, reason: str = "") -> Order:
    """Cancel an order, restoring stock if it had been confirmed.

    Orders still pending never took stock, so nothing is restored for them.
    """

    locked = _get_order(order.pk, lock=True)
    prev = locked.status
    if prev in NON_CANCELLABLE:
        raise InvalidTransitionError(f"Cannot cancel an order that is {prev}")
    if not _guarded_update(locked, expected=prev, target=OrderStatus.CANCELLED, cancelled_at=timezone.now()):
        raise ConflictError("Order changed while cancelling. Please retry.")

    if prev in Order.STOCK_COMMITTED_STATUSES:
        for item in locked.items.all().order_by("id"):
            if item.product_id is None:
                continue
            adjust_stock(
                product_id=item.product_id,
                delta=int(item.quantity),
                log_type=LogType.IN,
                reason=f"Order {locked.number} cancelled" + (f": {reason}" if reason else ""),
                reference_type=ReferenceType.ORDER,
                reference_id=str(locked.id),
                performed_by=performed_by,
            )

    locked.refresh_from_db()
    _log_status_change(locked, prev, OrderStatus.CANCELLED, stock_restored=prev in Order.STOCK_COMMITTED_STATUSES)
    if locked.payment_status == PaymentStatus.PAID:
        logger.warning(
            "cancelled_order_was_paid",
            extra={"event": "cancelled_order_was_paid", "order_id": locked.id, "order_number": locked.number},
        )
    _notify(send_order_cancelled_email, locked)
    return locked


@transaction.atomic
def refund_order(order: Order) -> Order:
    """Mark a paid, confirmed-or-later order as refunded. Stock does not move."""

    locked = _get_order(order.pk, lock=True)
    prev = locked.status
    if prev not in REFUNDABLE or locked.payment_status != PaymentStatus.PAID:
        raise InvalidTransitionError("Only paid orders that were confirmed can be refunded")
    _guarded_update(locked, expected=prev, target=OrderStatus.REFUNDED, payment_status=PaymentStatus.REFUNDED)
    locked.refresh_from_db()
    _log_status_change(locked, prev, OrderStatus.REFUNDED)
    return locked


def update_status(order: Order, target: str, *, performed_by=None) -> Order:
    """Admin entry point to the state machine."""

    if target == order.status:
        raise InvalidTransitionError(f"Order is already {target}")
    if target == OrderStatus.CONFIRMED:
        if order.status != OrderStatus.PENDING:
            raise InvalidTransitionError(f"Cannot confirm an order that is {order.status}")
        return confirm_order(order, performed_by=performed_by)
    if target in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        return advance_status(order, target)
    if target == OrderStatus.CANCELLED:
        return cancel_order(order, performed_by=performed_by)
    if target == OrderStatus.REFUNDED:
        return refund_order(order)
    raise InvalidTransitionError(f"Cannot move an order to {target}")


def add_tracking(order: Order, tracking_number: str) -> Order:
    Order.objects.filter(pk=order.pk).update(tracking_number=tracking_number, updated_at=timezone.now())
    order.refresh_from_db()
    try:
        logger.info(
            "order_tracking_added",
            extra={"event": "order_tracking_added", "order_id": order.id, "tracking_number": tracking_number},
        )
    except Exception:
        pass
    return order


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope is derived from the caller: for authenticated users, "user:<id>"; otherwise "anon".
    - If a record exists and the stored `request_hash` differs from the provided one, returns 409.
    - If a record exists but response is not yet stored, returns 409 to indicate in-progress.
    - If the handler raises, the key is released so the client can retry.
    """

    scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + timedelta(hours=24),
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        # Guard against key reuse with different fingerprints
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"detail": "Idempotency key reused with different request payload"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            return idem.response_json, int(idem.response_code)
        return {"detail": "Request in progress"}, 409

    try:
        body, code = handler()
    except Exception:
        IdempotencyKey.objects.filter(id=idem.id).delete()
        raise

    def _json_safe(value):
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, dict):
            return {k: _json_safe(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_json_safe(v) for v in value]
        return value

    IdempotencyKey.objects.filter(id=idem.id).update(response_json=_json_safe(body), response_code=code)
    return body, code


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Compute a canonical SHA256 hash of the request body.

    Uses sorted keys JSON representation to stabilize the hash across equivalent payloads.
    Returns None when data is falsy.
    """
    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()
    except (TypeError, ValueError):
        return None
