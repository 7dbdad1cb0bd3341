import json
from decimal import Decimal

import pytest
from catalog.tests.factories import stocked_product
from orders.tests.factories import place_order
from payments.gateway import reset_gateway, set_gateway
from payments.gateway.fake import FakeGateway
from payments.signing import sign_payload
from rest_framework.test import APIClient
from users.tests.factories import UserFactory

SECRET = "whsec_api"


@pytest.fixture
def gateway(settings):
    settings.PAYMENT_WEBHOOK_SECRET = SECRET
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _post_webhook(payload: bytes, signature: str):
    return APIClient().post(
        "/api/v1/payments/webhook/",
        data=payload,
        content_type="application/json",
        HTTP_PAYMENT_SIGNATURE=signature,
    )


@pytest.mark.django_db
def test_checkout_pay_via_webhook(gateway):
    user = UserFactory()
    product = stocked_product(5, price=Decimal("25.00"))
    order = place_order(user, (product, 2))
    client = _client(user)

    r_intent = client.post("/api/v1/payments/create-intent/", {"order_id": order.id}, format="json")
    assert r_intent.status_code == 201
    intent = r_intent.json()
    assert intent["amount"] == 5500
    assert intent["client_secret"]

    payload = json.dumps(
        {"id": "evt_1", "type": "payment_intent.succeeded", "data": {"object": {"id": intent["payment_intent_id"]}}}
    ).encode()
    r_hook = _post_webhook(payload, sign_payload(payload, SECRET))
    assert r_hook.status_code == 200
    assert r_hook.json() == {"received": True}

    r_status = client.get(f"/api/v1/payments/{order.id}/")
    assert r_status.status_code == 200
    assert r_status.json()["payment_status"] == "paid"
    product.refresh_from_db()
    assert product.stock == 3


@pytest.mark.django_db
def test_webhook_rejects_bad_signature(gateway):
    payload = b'{"type":"payment_intent.succeeded","data":{"object":{"id":"pi_1"}}}'
    r = _post_webhook(payload, sign_payload(payload, "forged"))
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_signature"

    r_missing = APIClient().post("/api/v1/payments/webhook/", data=payload, content_type="application/json")
    assert r_missing.status_code == 400


@pytest.mark.django_db
def test_confirm_endpoint(gateway):
    user = UserFactory()
    order = place_order(user, (stocked_product(5), 1))
    client = _client(user)
    intent_id = client.post("/api/v1/payments/create-intent/", {"order_id": order.id}, format="json").json()[
        "payment_intent_id"
    ]

    r = client.post(
        "/api/v1/payments/confirm/", {"payment_intent_id": intent_id, "payment_method_id": "pm_card"}, format="json"
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "succeeded"
    assert body["order_status"] == "confirmed"
    assert body["payment_status"] == "paid"

    assert _client(UserFactory()).post(
        "/api/v1/payments/confirm/", {"payment_intent_id": intent_id, "payment_method_id": "pm_card"}, format="json"
    ).status_code == 404


@pytest.mark.django_db
def test_provider_outage_returns_retryable_503(gateway):
    user = UserFactory()
    order = place_order(user, (stocked_product(5), 1))
    gateway.configure(available=False)

    r = _client(user).post("/api/v1/payments/create-intent/", {"order_id": order.id}, format="json")
    assert r.status_code == 503
    body = r.json()
    assert body["code"] == "payment_provider_unavailable"
    assert body["retryable"] is True


@pytest.mark.django_db
def test_payment_endpoints_are_owner_scoped(gateway):
    order = place_order(UserFactory(), (stocked_product(5), 1))
    stranger = _client(UserFactory())
    assert stranger.get(f"/api/v1/payments/{order.id}/").status_code == 404
    assert stranger.post("/api/v1/payments/create-intent/", {"order_id": order.id}, format="json").status_code == 404
    assert APIClient().get(f"/api/v1/payments/{order.id}/").status_code == 401
