"""Shared enumerations and choices used across apps."""

from django.db import models


class DraftPublished(models.TextChoices):
    DRAFT = "draft", "Draft"
    PUBLISHED = "published", "Published"


class LogType(models.TextChoices):
    """Direction of an inventory ledger entry."""

    IN = "in", "In"
    OUT = "out", "Out"
    ADJUSTMENT = "adjustment", "Adjustment"


class ReferenceType(models.TextChoices):
    """What caused an inventory ledger entry."""

    ORDER = "order", "Order"
    RESTOCK = "restock", "Restock"
    RETURN = "return", "Return"
    MANUAL = "manual", "Manual"
    SYSTEM = "system", "System"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders."""

    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    FAILED = "failed", "Failed"
    REFUNDED = "refunded", "Refunded"


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed"
