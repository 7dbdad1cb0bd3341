from unittest import mock

import pytest
import requests
from common.errors import PaymentProviderError
from payments.gateway import get_gateway, reset_gateway, set_gateway
from payments.gateway.fake import FakeGateway
from payments.gateway.http import HttpGateway
from payments.signing import sign_payload


def _response(status_code=200, body=None):
    resp = mock.Mock(status_code=status_code, text="")
    resp.json.return_value = body or {}
    return resp


def test_factory_builds_configured_gateway(settings):
    reset_gateway()
    settings.PAYMENT_GATEWAY = "payments.gateway.fake.FakeGateway"
    gateway = get_gateway()
    assert isinstance(gateway, FakeGateway)
    assert get_gateway() is gateway

    custom = FakeGateway()
    set_gateway(custom)
    assert get_gateway() is custom
    reset_gateway()


def test_fake_gateway_outcomes():
    gateway = FakeGateway()
    intent = gateway.create_intent(5500, "usd", {"order_id": "1"})
    assert intent.intent_id.startswith("pi_fake_")
    assert intent.amount == 5500
    assert gateway.confirm_intent(intent.intent_id, "pm_card") == "succeeded"

    gateway.configure(should_succeed=False)
    assert gateway.confirm_intent(intent.intent_id, "pm_card") == "requires_payment_method"

    gateway.configure(available=False)
    with pytest.raises(PaymentProviderError):
        gateway.create_intent(100, "usd", {})
    methods = [c["method"] for c in gateway.calls]
    assert methods == ["create_intent", "confirm_intent", "confirm_intent", "create_intent"]


def test_fake_gateway_verifies_with_configured_secret(settings):
    settings.PAYMENT_WEBHOOK_SECRET = "whsec_fake"
    payload = b'{"type":"ping"}'
    assert FakeGateway().verify_webhook(payload, sign_payload(payload, "whsec_fake"))
    assert not FakeGateway().verify_webhook(payload, sign_payload(payload, "nope"))


def test_http_gateway_creates_intent():
    session = mock.Mock()
    session.post.return_value = _response(
        body={"id": "pi_123", "client_secret": "pi_123_secret", "status": "requires_payment_method", "amount": 5500}
    )
    gateway = HttpGateway(base_url="https://pay.example.com/v1/", api_key="sk_test", timeout=3, session=session)

    intent = gateway.create_intent(5500, "usd", {"order_id": "9"})
    assert intent.intent_id == "pi_123"
    assert intent.client_secret == "pi_123_secret"
    args, kwargs = session.post.call_args
    assert args[0] == "https://pay.example.com/v1/payment_intents"
    assert kwargs["timeout"] == 3.0
    assert kwargs["data"]["metadata[order_id]"] == "9"
    assert kwargs["headers"]["Authorization"] == "Bearer sk_test"


def test_http_gateway_confirm_returns_status():
    session = mock.Mock()
    session.post.return_value = _response(body={"id": "pi_123", "status": "succeeded"})
    gateway = HttpGateway(base_url="https://pay.example.com", api_key="k", session=session)
    assert gateway.confirm_intent("pi_123", "pm_1") == "succeeded"
    assert session.post.call_args[0][0] == "https://pay.example.com/payment_intents/pi_123/confirm"


@pytest.mark.parametrize(
    "failure",
    [requests.Timeout("slow"), requests.ConnectionError("down")],
)
def test_http_gateway_transport_failures_are_retryable(failure):
    session = mock.Mock()
    session.post.side_effect = failure
    gateway = HttpGateway(base_url="https://pay.example.com", api_key="k", timeout=1, session=session)
    with pytest.raises(PaymentProviderError):
        gateway.create_intent(100, "usd", {})


def test_http_gateway_provider_error_status():
    session = mock.Mock()
    session.post.return_value = _response(status_code=502)
    gateway = HttpGateway(base_url="https://pay.example.com", api_key="k", session=session)
    with pytest.raises(PaymentProviderError):
        gateway.confirm_intent("pi_1", "pm_1")


def test_http_gateway_missing_intent_id():
    session = mock.Mock()
    session.post.return_value = _response(body={"status": "requires_payment_method"})
    gateway = HttpGateway(base_url="https://pay.example.com", api_key="k", session=session)
    with pytest.raises(PaymentProviderError):
        gateway.create_intent(100, "usd", {})
