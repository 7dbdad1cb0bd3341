import json
from decimal import Decimal

import pytest
from catalog.tests.factories import stocked_product
from common.choices import OrderStatus, PaymentStatus, ReferenceType
from common.errors import (
    InsufficientStockError,
    InvalidSignatureError,
    InvalidTransitionError,
    PaymentProviderError,
    ValidationFailedError,
)
from inventory.models import InventoryLog
from orders.models import Order
from orders.services import cancel_order, confirm_order
from orders.tests.factories import place_order
from payments.gateway.fake import FakeGateway
from payments.services import (
    confirm_payment,
    create_payment_intent,
    handle_webhook,
    record_payment_failed,
    record_payment_succeeded,
    to_minor_units,
)
from payments.signing import sign_payload
from users.tests.factories import UserFactory

SECRET = "whsec_services"


@pytest.fixture
def gateway(settings):
    settings.PAYMENT_WEBHOOK_SECRET = SECRET
    return FakeGateway()


def _event(event_type, intent_id, **obj):
    return json.dumps({"id": "evt_1", "type": event_type, "data": {"object": {"id": intent_id, **obj}}}).encode()


def _deliver(gateway, payload):
    return handle_webhook(payload=payload, signature=sign_payload(payload, SECRET), gateway=gateway)


def _pending_order_with_intent(gateway, stock=5, quantity=2):
    product = stocked_product(stock, price=Decimal("25.00"))
    order = place_order(UserFactory(), (product, quantity))
    intent = create_payment_intent(order=order, gateway=gateway)
    order.refresh_from_db()
    return order, product, intent


def _order_out_logs(order):
    return InventoryLog.objects.filter(reference_type=ReferenceType.ORDER, reference_id=str(order.id), type="out")


def test_to_minor_units():
    assert to_minor_units(Decimal("55.00")) == 5500
    assert to_minor_units(Decimal("0.01")) == 1
    assert to_minor_units(Decimal("19.995")) == 2000


@pytest.mark.django_db
def test_create_intent_stores_reference_after_provider_success(gateway):
    order, _, intent = _pending_order_with_intent(gateway)
    assert order.payment_intent_id == intent.intent_id
    call = gateway.calls[0]
    assert call["amount"] == 5500
    assert call["currency"] == "usd"
    assert call["metadata"]["order_number"] == order.number


@pytest.mark.django_db
def test_create_intent_provider_down_stores_nothing(gateway):
    order = place_order(UserFactory(), (stocked_product(5), 1))
    gateway.configure(available=False)
    with pytest.raises(PaymentProviderError):
        create_payment_intent(order=order, gateway=gateway)
    order.refresh_from_db()
    assert order.payment_intent_id is None


@pytest.mark.django_db
def test_create_intent_requires_pending_order(gateway):
    order = place_order(UserFactory(), (stocked_product(5), 1))
    cancel_order(order)
    with pytest.raises(InvalidTransitionError):
        create_payment_intent(order=order, gateway=gateway)
    assert gateway.calls == []


@pytest.mark.django_db
def test_create_intent_rechecks_stale_order(gateway):
    order = place_order(UserFactory(), (stocked_product(5), 1))
    Order.objects.filter(pk=order.pk).update(status=OrderStatus.CANCELLED)
    assert order.status == OrderStatus.PENDING
    with pytest.raises(InvalidTransitionError):
        create_payment_intent(order=order, gateway=gateway)
    assert gateway.calls == []


@pytest.mark.django_db
def test_success_for_replaced_intent_still_confirms(gateway, caplog):
    order, product, first = _pending_order_with_intent(gateway)
    second = create_payment_intent(order=order, gateway=gateway)
    order.refresh_from_db()
    assert order.payment_intent_id == second.intent_id

    payload = _event("payment_intent.succeeded", first.intent_id, metadata={"order_id": str(order.id)})
    with caplog.at_level("INFO", logger="storefront.payments"):
        _deliver(gateway, payload)
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.status == OrderStatus.CONFIRMED
    assert order.payment_status == PaymentStatus.PAID
    assert order.payment_intent_id == first.intent_id
    assert product.stock == 3
    assert not any(r.getMessage() == "payment_intent_unknown" for r in caplog.records)

    # Redelivery matches the stored intent now and stays a no-op
    _deliver(gateway, payload)
    product.refresh_from_db()
    assert product.stock == 3
    assert _order_out_logs(order).count() == 1


@pytest.mark.django_db
def test_second_intent_paid_after_first_is_flagged(gateway, caplog):
    order, product, first = _pending_order_with_intent(gateway)
    second = create_payment_intent(order=order, gateway=gateway)
    _deliver(gateway, _event("payment_intent.succeeded", second.intent_id, metadata={"order_id": str(order.id)}))

    with caplog.at_level("WARNING", logger="storefront.payments"):
        _deliver(gateway, _event("payment_intent.succeeded", first.intent_id, metadata={"order_id": str(order.id)}))
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.payment_intent_id == second.intent_id
    assert product.stock == 3
    assert any(r.getMessage() == "payment_duplicate_charge" for r in caplog.records)


@pytest.mark.django_db
def test_success_webhook_pays_and_confirms(gateway):
    order, product, intent = _pending_order_with_intent(gateway)

    assert _deliver(gateway, _event("payment_intent.succeeded", intent.intent_id, payment_method="pm_card")) == {
        "received": True
    }
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.status == OrderStatus.CONFIRMED
    assert order.payment_status == PaymentStatus.PAID
    assert order.payment_method == "pm_card"
    assert order.paid_at is not None
    assert product.stock == 3
    (entry,) = _order_out_logs(order)
    assert (entry.quantity, entry.previous_stock, entry.new_stock) == (-2, 5, 3)


@pytest.mark.django_db
def test_duplicate_success_webhook_decrements_once(gateway):
    order, product, intent = _pending_order_with_intent(gateway)
    payload = _event("payment_intent.succeeded", intent.intent_id)

    _deliver(gateway, payload)
    _deliver(gateway, payload)
    product.refresh_from_db()
    assert product.stock == 3
    assert _order_out_logs(order).count() == 1


@pytest.mark.django_db
def test_invalid_signature_has_no_side_effects(gateway):
    order, product, intent = _pending_order_with_intent(gateway)
    payload = _event("payment_intent.succeeded", intent.intent_id)

    with pytest.raises(InvalidSignatureError):
        handle_webhook(payload=payload, signature=sign_payload(payload, "forged"), gateway=gateway)
    with pytest.raises(InvalidSignatureError):
        handle_webhook(payload=payload, signature="", gateway=gateway)
    order.refresh_from_db()
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING


@pytest.mark.django_db
def test_malformed_payload_rejected(gateway):
    with pytest.raises(ValidationFailedError):
        _deliver(gateway, b"not json")
    with pytest.raises(ValidationFailedError):
        _deliver(gateway, json.dumps({"data": {}}).encode())


@pytest.mark.django_db
def test_unknown_event_and_intent_acknowledged(gateway):
    assert _deliver(gateway, _event("charge.refunded", "pi_x")) == {"received": True}
    assert _deliver(gateway, _event("payment_intent.succeeded", "pi_missing")) == {"received": True}
    assert record_payment_failed("pi_missing") is None


@pytest.mark.django_db
@pytest.mark.parametrize("event_type", ["payment_intent.payment_failed", "payment_intent.canceled"])
def test_failure_webhook_marks_failed_only(gateway, event_type):
    order, product, intent = _pending_order_with_intent(gateway)

    _deliver(gateway, _event(event_type, intent.intent_id))
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.payment_status == PaymentStatus.FAILED
    assert order.status == OrderStatus.PENDING
    assert product.stock == 5


@pytest.mark.django_db
def test_failure_after_success_is_ignored(gateway):
    order, _, intent = _pending_order_with_intent(gateway)
    record_payment_succeeded(intent.intent_id)
    record_payment_failed(intent.intent_id)
    order.refresh_from_db()
    assert order.payment_status == PaymentStatus.PAID
    assert order.status == OrderStatus.CONFIRMED


@pytest.mark.django_db
def test_success_after_failure_still_confirms(gateway):
    order, product, intent = _pending_order_with_intent(gateway)
    record_payment_failed(intent.intent_id)
    record_payment_succeeded(intent.intent_id)
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.payment_status == PaymentStatus.PAID
    assert order.status == OrderStatus.CONFIRMED
    assert product.stock == 3


@pytest.mark.django_db
def test_success_for_cancelled_order_records_payment_only(gateway, caplog):
    order, product, intent = _pending_order_with_intent(gateway)
    cancel_order(order)

    with caplog.at_level("WARNING", logger="storefront.payments"):
        record_payment_succeeded(intent.intent_id)
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.status == OrderStatus.CANCELLED
    assert order.payment_status == PaymentStatus.PAID
    assert product.stock == 5
    assert any(r.getMessage() == "payment_for_cancelled_order" for r in caplog.records)


@pytest.mark.django_db
def test_success_for_admin_confirmed_order_does_not_move_stock(gateway):
    order, product, intent = _pending_order_with_intent(gateway)
    confirm_order(order)

    record_payment_succeeded(intent.intent_id)
    order.refresh_from_db()
    product.refresh_from_db()
    assert order.payment_status == PaymentStatus.PAID
    assert product.stock == 3
    assert _order_out_logs(order).count() == 1


@pytest.mark.django_db
def test_success_with_stock_gone_rolls_back_payment(gateway):
    order, product, intent = _pending_order_with_intent(gateway, stock=2, quantity=2)
    rival = place_order(UserFactory(), (product, 2))
    confirm_order(rival)

    with pytest.raises(InsufficientStockError):
        record_payment_succeeded(intent.intent_id)
    order.refresh_from_db()
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.paid_at is None


@pytest.mark.django_db
def test_confirm_payment_success_and_repeat(gateway):
    order, product, intent = _pending_order_with_intent(gateway)

    updated, provider_status = confirm_payment(
        intent_id=intent.intent_id, method_id="pm_card", user=order.user, gateway=gateway
    )
    assert provider_status == "succeeded"
    assert updated.status == OrderStatus.CONFIRMED
    assert updated.payment_method == "pm_card"

    with pytest.raises(ValidationFailedError):
        confirm_payment(intent_id=intent.intent_id, method_id="pm_card", user=order.user, gateway=gateway)


@pytest.mark.django_db
def test_confirm_payment_declined(gateway):
    order, product, intent = _pending_order_with_intent(gateway)
    gateway.configure(should_succeed=False)

    updated, provider_status = confirm_payment(intent_id=intent.intent_id, method_id="pm_card", gateway=gateway)
    product.refresh_from_db()
    assert provider_status == "requires_payment_method"
    assert updated.payment_status == PaymentStatus.FAILED
    assert updated.status == Order.STATUS_PENDING
    assert product.stock == 5
