"""Read-side queries for the inventory admin endpoints."""

from catalog.models import Product
from django.db.models import F
from django.utils.dateparse import parse_datetime

from .models import InventoryLog


def list_inventory(*, low_stock: bool = False, search: str | None = None):
    qs = Product.objects.all().order_by("stock", "title")
    if low_stock:
        qs = qs.filter(stock__lte=F("low_stock_threshold"))
    if search:
        qs = qs.filter(title__icontains=search)
    return qs


def list_logs(
    *,
    product_id: int | None = None,
    log_type: str | None = None,
    reference_type: str | None = None,
    reference_id: str | None = None,
    created_after: str | None = None,
):
    qs = InventoryLog.objects.select_related("product", "performed_by").order_by("-created_at", "-id")
    if product_id:
        qs = qs.filter(product_id=product_id)
    if log_type:
        qs = qs.filter(type=log_type)
    if reference_type:
        qs = qs.filter(reference_type=reference_type)
    if reference_id:
        qs = qs.filter(reference_id=reference_id)
    if created_after:
        dt = parse_datetime(created_after)
        if dt:
            qs = qs.filter(created_at__gte=dt)
    return qs


# EOF
