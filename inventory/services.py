"""Inventory services: atomic stock mutations paired with ledger entries.

All stock changes in the system funnel through `adjust_stock` (relative) or
`set_stock` (absolute). Both mutate `Product.stock` and append one
`InventoryLog` in the same transaction, so the two can never diverge.
"""

import logging
from typing import Iterable, Optional

from catalog.models import Product
from common.choices import LogType, ReferenceType
from common.errors import InsufficientStockError, NotFoundError, ValidationFailedError
from django.db import transaction
from django.db.models import Count, F, Q, Sum

from .models import InventoryLog
from .selectors import list_inventory

logger = logging.getLogger("storefront.inventory")


def _log_stock_changed(entry: InventoryLog) -> None:
    try:
        logger.info(
            "stock_changed",
            extra={
                "event": "stock_changed",
                "product_id": entry.product_id,
                "type": entry.type,
                "quantity": entry.quantity,
                "previous_stock": entry.previous_stock,
                "new_stock": entry.new_stock,
                "reference_type": entry.reference_type,
                "reference_id": entry.reference_id,
            },
        )
    except Exception:
        # Logging should never break mutations
        pass


@transaction.atomic
def adjust_stock(
    *,
    product_id: int,
    delta: int,
    log_type: str,
    reason: str,
    reference_type: str = ReferenceType.MANUAL,
    reference_id: str = "",
    performed_by=None,
) -> InventoryLog:
    """Apply a signed stock delta with a single conditional UPDATE.

    Decrements only succeed when the row still holds enough stock at write
    time (`stock >= -delta`), so concurrent consumers of the last units can
    never both win. Raises `InsufficientStockError` otherwise.
    """

    if delta == 0:
        raise ValidationFailedError("Quantity must be non-zero")

    qs = Product.objects.filter(pk=product_id)
    if delta < 0:
        qs = qs.filter(stock__gte=-delta)
    updated = qs.update(stock=F("stock") + delta)
    if not updated:
        if not Product.objects.filter(pk=product_id).exists():
            raise NotFoundError("Product not found")
        name = Product.objects.values_list("title", flat=True).get(pk=product_id)
        raise InsufficientStockError(f'Insufficient stock for "{name}"')

    # The UPDATE above holds the row lock until commit, so this read is ours
    new_stock = Product.objects.values_list("stock", flat=True).get(pk=product_id)
    entry = InventoryLog.objects.create(
        product_id=product_id,
        type=log_type,
        quantity=delta,
        previous_stock=new_stock - delta,
        new_stock=new_stock,
        reason=reason,
        reference_type=reference_type,
        reference_id=str(reference_id or ""),
        performed_by=performed_by if getattr(performed_by, "pk", None) else None,
    )
    _log_stock_changed(entry)
    return entry


@transaction.atomic
def set_stock(
    *,
    product_id: int,
    new_stock: int,
    reason: str,
    reference_type: str = ReferenceType.MANUAL,
    reference_id: str = "",
    performed_by=None,
) -> Optional[InventoryLog]:
    """Set absolute stock; the ledger records `new - previous`.

    Returns None when the value is unchanged (nothing to record).
    """

    if new_stock < 0:
        raise ValidationFailedError("Stock cannot be negative")
    try:
        product = Product.objects.select_for_update().only("id", "stock").get(pk=product_id)
    except Product.DoesNotExist:
        raise NotFoundError("Product not found")

    previous = int(product.stock)
    if previous == new_stock:
        return None
    Product.objects.filter(pk=product_id).update(stock=new_stock)
    entry = InventoryLog.objects.create(
        product_id=product_id,
        type=InventoryLog.TYPE_ADJUSTMENT,
        quantity=new_stock - previous,
        previous_stock=previous,
        new_stock=new_stock,
        reason=reason,
        reference_type=reference_type,
        reference_id=str(reference_id or ""),
        performed_by=performed_by if getattr(performed_by, "pk", None) else None,
    )
    _log_stock_changed(entry)
    return entry


def apply_adjustment(*, product_id: int, adjustment_type: str, quantity: int, reason: str, performed_by=None) -> dict:
    """Manual admin adjustment of one product's stock.

    - ``in``: add ``quantity``
    - ``out``: subtract ``quantity``; fails if it would go negative
    - ``adjustment``: set stock to ``quantity``
    """

    reference_id = str(getattr(performed_by, "pk", "") or "")
    if adjustment_type in (LogType.IN, LogType.OUT):
        if quantity <= 0:
            raise ValidationFailedError("Quantity must be positive", errors={"quantity": ["Must be positive."]})
        delta = quantity if adjustment_type == LogType.IN else -quantity
        entry = adjust_stock(
            product_id=product_id,
            delta=delta,
            log_type=adjustment_type,
            reason=reason,
            reference_type=ReferenceType.MANUAL,
            reference_id=reference_id,
            performed_by=performed_by,
        )
    elif adjustment_type == LogType.ADJUSTMENT:
        entry = set_stock(
            product_id=product_id,
            new_stock=quantity,
            reason=reason,
            reference_type=ReferenceType.MANUAL,
            reference_id=reference_id,
            performed_by=performed_by,
        )
    else:
        raise ValidationFailedError("Invalid inventory type", errors={"type": ["Must be in, out or adjustment."]})

    if entry is None:
        current = Product.objects.values_list("stock", flat=True).get(pk=product_id)
        return {"product_id": product_id, "previous_stock": current, "new_stock": current, "adjustment": 0, "log": None}
    return {
        "product_id": product_id,
        "previous_stock": entry.previous_stock,
        "new_stock": entry.new_stock,
        "adjustment": entry.quantity,
        "log": entry,
    }


def bulk_update(*, updates: Iterable[dict], performed_by=None) -> list[dict]:
    """Set absolute stock for many products.

    Each row is its own transaction; a missing product is reported in the
    results instead of aborting the batch.
    """

    results = []
    for row in updates:
        product_id = row["product_id"]
        try:
            entry = set_stock(
                product_id=product_id,
                new_stock=int(row["stock"]),
                reason="Bulk update",
                reference_type=ReferenceType.MANUAL,
                reference_id=str(getattr(performed_by, "pk", "") or ""),
                performed_by=performed_by,
            )
        except NotFoundError:
            results.append({"product_id": product_id, "success": False, "message": "Product not found"})
            continue
        except ValidationFailedError as exc:
            results.append({"product_id": product_id, "success": False, "message": exc.detail})
            continue
        if entry is None:
            stock = Product.objects.values_list("stock", flat=True).get(pk=product_id)
            results.append({"product_id": product_id, "success": True, "previous_stock": stock, "new_stock": stock})
        else:
            results.append(
                {
                    "product_id": product_id,
                    "success": True,
                    "previous_stock": entry.previous_stock,
                    "new_stock": entry.new_stock,
                }
            )
    return results


def inventory_stats() -> dict:
    """Aggregate stock figures across the whole catalog."""

    agg = Product.objects.aggregate(
        total_products=Count("id"),
        total_stock=Sum("stock"),
        low_stock_count=Count("id", filter=Q(stock__lte=F("low_stock_threshold"))),
        out_of_stock_count=Count("id", filter=Q(stock=0)),
    )
    return {
        "total_products": agg["total_products"] or 0,
        "total_stock": agg["total_stock"] or 0,
        "low_stock_count": agg["low_stock_count"] or 0,
        "out_of_stock_count": agg["out_of_stock_count"] or 0,
    }


def replay_ledger(*, product_id: int, initial_stock: int = 0) -> int:
    """Recompute stock by replaying the product's ledger in write order."""

    stock = initial_stock
    for delta in InventoryLog.objects.filter(product_id=product_id).order_by("id").values_list("quantity", flat=True):
        stock += delta
    return stock


def find_divergent_products(*, product_ids: Optional[Iterable[int]] = None) -> list[dict]:
    """Return products whose stock disagrees with their replayed ledger.

    Products start at zero stock and receive opening balances via ledger
    entries, so a replay from zero must reproduce the current value.
    """

    qs = Product.objects.all().order_by("id")
    if product_ids is not None:
        qs = qs.filter(id__in=list(product_ids))
    divergent = []
    for product_id, stock in qs.values_list("id", "stock"):
        replayed = replay_ledger(product_id=product_id)
        if replayed != stock:
            divergent.append({"product_id": product_id, "stock": stock, "ledger": replayed})
    return divergent


def inventory_overview(*, low_stock: bool = False, search: Optional[str] = None) -> dict:
    """Product stock listing plus catalog-wide stats."""

    return {"products": list_inventory(low_stock=low_stock, search=search), "stats": inventory_stats()}
