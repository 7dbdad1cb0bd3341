"""DRF exception handler translating domain errors into API responses."""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import DomainError, PaymentProviderError

logger = logging.getLogger("storefront.api")


def api_exception_handler(exc, context):
    """Map `DomainError` subclasses to `{"detail", "code"}` payloads.

    Everything else falls through to DRF's default handler.
    """

    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    view = context.get("view")
    if isinstance(exc, PaymentProviderError):
        # Provider detail stays in the logs; the client only learns it may retry
        logger.warning(
            "payment_provider_error",
            extra={"event": "payment_provider_error", "view": type(view).__name__, "error": str(exc)},
        )
        body = {"detail": PaymentProviderError.default_detail, "code": exc.code, "retryable": True}
        return Response(body, status=exc.status_code)

    body = {"detail": exc.detail, "code": exc.code}
    if exc.errors:
        body["errors"] = exc.errors
    return Response(body, status=exc.status_code)
