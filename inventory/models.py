"""Inventory models.

The ledger is append-only: every change to `catalog.Product.stock` is paired
with exactly one `InventoryLog` row written in the same transaction.
"""

from common.choices import LogType, ReferenceType
from django.conf import settings
from django.db import models


class InventoryLogQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise TypeError("Inventory log entries are immutable")

    def delete(self):
        raise TypeError("Inventory log entries cannot be deleted")


class InventoryLog(models.Model):
    TYPE_IN = LogType.IN
    TYPE_OUT = LogType.OUT
    TYPE_ADJUSTMENT = LogType.ADJUSTMENT
    TYPE_CHOICES = LogType.choices

    product = models.ForeignKey("catalog.Product", related_name="inventory_logs", on_delete=models.PROTECT)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES)
    quantity = models.IntegerField()  # signed delta: new_stock - previous_stock
    previous_stock = models.IntegerField()
    new_stock = models.IntegerField()
    reason = models.CharField(max_length=200)
    reference_type = models.CharField(max_length=16, choices=ReferenceType.choices, default=ReferenceType.MANUAL)
    reference_id = models.CharField(max_length=64, blank=True)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="inventory_logs",
        on_delete=models.SET_NULL,
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = InventoryLogQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                name="inventorylog_delta_matches_stock",
                condition=models.Q(new_stock=models.F("previous_stock") + models.F("quantity")),
            ),
            models.CheckConstraint(name="inventorylog_new_stock_non_negative", condition=models.Q(new_stock__gte=0)),
        ]
        indexes = [
            models.Index(fields=["product", "created_at"]),
            models.Index(fields=["type"]),
            models.Index(fields=["reference_type", "reference_id"]),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.type} {self.quantity:+d} for product={self.product_id} ({self.previous_stock}->{self.new_stock})"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise TypeError("Inventory log entries are immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise TypeError("Inventory log entries cannot be deleted")
