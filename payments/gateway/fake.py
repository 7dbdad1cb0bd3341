"""Configurable fake payment gateway for development and testing.

No external calls are made. Behaviour is switched at runtime with
`configure()`; webhooks are verified with the real signing scheme against
`PAYMENT_WEBHOOK_SECRET` so signed test payloads exercise the full path.
"""

from uuid import uuid4

from common.errors import PaymentProviderError
from django.conf import settings

from ..signing import DEFAULT_TOLERANCE_SECONDS, verify_signature
from .port import STATUS_SUCCEEDED, IntentResult, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.available: bool = True
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool = True, available: bool = True) -> None:
        self.should_succeed = should_succeed
        self.available = available

    def _check_available(self) -> None:
        if not self.available:
            raise PaymentProviderError("Fake gateway configured as unavailable")

    def create_intent(self, amount: int, currency: str, metadata: dict) -> IntentResult:
        self.calls.append({"method": "create_intent", "amount": amount, "currency": currency, "metadata": metadata})
        self._check_available()
        intent_id = f"pi_fake_{uuid4().hex[:16]}"
        return IntentResult(
            intent_id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:8]}",
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            metadata=dict(metadata),
        )

    def confirm_intent(self, intent_id: str, method_id: str) -> str:
        self.calls.append({"method": "confirm_intent", "intent_id": intent_id, "method_id": method_id})
        self._check_available()
        return STATUS_SUCCEEDED if self.should_succeed else "requires_payment_method"

    def verify_webhook(self, payload: bytes, signature: str) -> bool:
        return verify_signature(
            payload,
            signature,
            getattr(settings, "PAYMENT_WEBHOOK_SECRET", ""),
            tolerance=int(getattr(settings, "PAYMENT_WEBHOOK_TOLERANCE_SECONDS", DEFAULT_TOLERANCE_SECONDS)),
        )
