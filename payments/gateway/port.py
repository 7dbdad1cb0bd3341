"""Payment gateway port (abstract interface).

Order and payment services talk to the provider only through this contract,
so the fake and the HTTP adapter are interchangeable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

# Provider intent statuses the services act on
STATUS_SUCCEEDED = "succeeded"
FAILED_STATUSES = frozenset({"requires_payment_method", "canceled", "failed"})


@dataclass(frozen=True)
class IntentResult:
    """Provider answer to an intent creation."""

    intent_id: str
    client_secret: str | None = None
    status: str = "requires_payment_method"
    amount: int | None = None
    currency: str | None = None
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_intent(self, amount: int, currency: str, metadata: dict) -> IntentResult:
        """Create a payment intent for `amount` minor units."""
        ...

    @abstractmethod
    def confirm_intent(self, intent_id: str, method_id: str) -> str:
        """Confirm an intent with a payment method; returns the provider status."""
        ...

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the provider."""
        ...
