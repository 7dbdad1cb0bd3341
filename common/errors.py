"""Domain error taxonomy shared by all apps.

Services raise these; the API exception handler maps them to HTTP responses
so views stay free of status-code bookkeeping.
"""


class DomainError(Exception):
    """Base class for recoverable, request-scoped failures."""

    status_code = 400
    default_code = "error"
    default_detail = "Request could not be processed."

    def __init__(self, detail: str | None = None, *, code: str | None = None, errors: dict | None = None):
        self.detail = detail or self.default_detail
        self.code = code or self.default_code
        self.errors = errors
        super().__init__(self.detail)


class NotFoundError(DomainError):
    status_code = 404
    default_code = "not_found"
    default_detail = "Not found."


class ValidationFailedError(DomainError):
    default_code = "validation_failed"
    default_detail = "Invalid input."


class EmptyCartError(ValidationFailedError):
    default_code = "empty_cart"
    default_detail = "Cart is empty."


class CouponError(ValidationFailedError):
    default_code = "invalid_coupon"
    default_detail = "Invalid coupon code."


class InvalidTransitionError(DomainError):
    default_code = "invalid_transition"
    default_detail = "Order status change is not allowed."


class InsufficientStockError(DomainError):
    default_code = "insufficient_stock"
    default_detail = "Insufficient stock."


class OutOfStockError(InsufficientStockError):
    """Checkout line exceeds what is on hand for the named product."""

    default_code = "out_of_stock"

    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f'Product "{product_name}" is out of stock')


class ConflictError(DomainError):
    status_code = 409
    default_code = "conflict"
    default_detail = "Request conflicts with the current state. Please retry."


class InvalidSignatureError(DomainError):
    default_code = "invalid_signature"
    default_detail = "Webhook signature verification failed."


class PaymentProviderError(DomainError):
    """Payment collaborator failed or timed out. Safe to retry."""

    status_code = 503
    default_code = "payment_provider_unavailable"
    default_detail = "Payment service is temporarily unavailable. Please retry."


class AssetStoreError(DomainError):
    status_code = 502
    default_code = "asset_store_error"
    default_detail = "Image storage is temporarily unavailable."
