"""HTTP payment gateway adapter.

Talks to a Stripe-compatible REST API at `PAYMENT_API_URL` using `requests`.
Every call is bounded by `PAYMENT_TIMEOUT_SECONDS`; transport failures,
timeouts and provider errors surface as `PaymentProviderError`.
"""

import logging

import requests
from common.errors import PaymentProviderError
from django.conf import settings

from ..signing import DEFAULT_TOLERANCE_SECONDS, verify_signature
from .port import IntentResult, PaymentGateway

logger = logging.getLogger("storefront.payments")


class HttpGateway(PaymentGateway):
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        webhook_secret: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or getattr(settings, "PAYMENT_API_URL", "")).rstrip("/")
        self.api_key = api_key if api_key is not None else getattr(settings, "PAYMENT_API_KEY", "")
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else getattr(settings, "PAYMENT_WEBHOOK_SECRET", "")
        )
        self.timeout = float(timeout if timeout is not None else getattr(settings, "PAYMENT_TIMEOUT_SECONDS", 10))
        self.session = session or requests.Session()

    def _post(self, path: str, data: dict) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.post(
                url,
                data=data,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.error("payment_provider_timeout", extra={"event": "payment_provider_timeout", "path": path})
            raise PaymentProviderError(f"Payment provider timed out after {self.timeout}s")
        except requests.RequestException as exc:
            logger.error("payment_provider_unreachable", extra={"event": "payment_provider_unreachable", "path": path})
            raise PaymentProviderError(f"Payment provider unreachable: {exc}")

        if resp.status_code >= 400:
            raise PaymentProviderError(f"Payment provider returned {resp.status_code}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError:
            raise PaymentProviderError("Payment provider returned a non-JSON response")

    def create_intent(self, amount: int, currency: str, metadata: dict) -> IntentResult:
        data = {"amount": amount, "currency": currency}
        for key, value in (metadata or {}).items():
            data[f"metadata[{key}]"] = value
        body = self._post("payment_intents", data)
        if not body.get("id"):
            raise PaymentProviderError("Payment provider response is missing the intent id")
        return IntentResult(
            intent_id=body["id"],
            client_secret=body.get("client_secret"),
            status=body.get("status", "requires_payment_method"),
            amount=body.get("amount", amount),
            currency=body.get("currency", currency),
            metadata=body.get("metadata") or {},
        )

    def confirm_intent(self, intent_id: str, method_id: str) -> str:
        body = self._post(f"payment_intents/{intent_id}/confirm", {"payment_method": method_id})
        return str(body.get("status", ""))

    def verify_webhook(self, payload: bytes, signature: str) -> bool:
        return verify_signature(
            payload,
            signature,
            self.webhook_secret,
            tolerance=int(getattr(settings, "PAYMENT_WEBHOOK_TOLERANCE_SECONDS", DEFAULT_TOLERANCE_SECONDS)),
        )
