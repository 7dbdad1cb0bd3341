"""Payment gateway factory.

`get_gateway()` builds the adapter named by `settings.PAYMENT_GATEWAY` once
per process; `set_gateway()` / `reset_gateway()` swap it, mainly for tests.
"""

from django.conf import settings
from django.utils.module_loading import import_string

from .port import IntentResult, PaymentGateway

DEFAULT_GATEWAY = "payments.gateway.fake.FakeGateway"

_current_gateway: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = import_string(getattr(settings, "PAYMENT_GATEWAY", DEFAULT_GATEWAY))()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None


__all__ = ["IntentResult", "PaymentGateway", "get_gateway", "set_gateway", "reset_gateway"]
