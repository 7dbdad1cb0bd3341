"""Read-only sales analytics over orders.

Cancelled orders never count towards revenue, order counts or product sales.
Customers are non-staff users.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from catalog.models import Product
from common.choices import OrderStatus
from common.errors import ValidationFailedError
from django.contrib.auth import get_user_model
from django.db.models import Count, Max, Sum
from django.db.models.functions import TruncDate, TruncMonth, TruncWeek
from django.utils import timezone
from orders.models import Order, OrderItem
from orders.pricing import money

PERIODS = ("today", "week", "month", "year", "all")
GROUPINGS = {"day": TruncDate, "week": TruncWeek, "month": TruncMonth}
PRODUCT_SORTS = {"revenue": "-revenue", "sales": "-sales_count"}


def period_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Start of the reporting window; `None` for `all`."""

    now = timezone.localtime(now or timezone.now())
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == "all":
        return None
    raise ValidationFailedError("Invalid period", errors={"period": [f"Must be one of {', '.join(PERIODS)}."]})


def counted_orders(*, start: Optional[datetime] = None, end: Optional[datetime] = None):
    qs = Order.objects.exclude(status=OrderStatus.CANCELLED)
    if start is not None:
        qs = qs.filter(created_at__gte=start)
    if end is not None:
        qs = qs.filter(created_at__lte=end)
    return qs


def _average(total: Decimal, count: int) -> Decimal:
    return money(total / count) if count else Decimal("0.00")


def top_products(orders, *, sort_by: str = "revenue", limit: int = 10) -> list[dict]:
    if sort_by not in PRODUCT_SORTS:
        raise ValidationFailedError("Invalid sort", errors={"sort_by": ["Must be revenue or sales."]})
    rows = (
        OrderItem.objects.filter(order__in=orders)
        .values("product_id")
        .annotate(name=Max("name"), sales_count=Sum("quantity"), revenue=Sum("line_total"))
        .order_by(PRODUCT_SORTS[sort_by], "product_id")[:limit]
    )
    return [
        {
            "product_id": row["product_id"],
            "name": row["name"],
            "sales_count": int(row["sales_count"] or 0),
            "revenue": money(row["revenue"] or 0),
        }
        for row in rows
    ]


def dashboard(*, period: str = "today", now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    start = period_start(period, now)
    orders = counted_orders(start=start)
    agg = orders.aggregate(total_orders=Count("id"), total_revenue=Sum("total"))
    total_orders = agg["total_orders"] or 0
    total_revenue = money(agg["total_revenue"] or 0)
    return {
        "period": period,
        "date_range": {"start": start, "end": now},
        "metrics": {
            "total_orders": total_orders,
            "total_revenue": total_revenue,
            "total_customers": get_user_model().objects.filter(is_staff=False).count(),
            "average_order_value": _average(total_revenue, total_orders),
        },
        "top_products": top_products(orders),
    }


def sales_series(
    *, group_by: str = "day", start: Optional[datetime] = None, end: Optional[datetime] = None
) -> list[dict]:
    """Order count and revenue per day, ISO week (Monday start) or month."""

    trunc = GROUPINGS.get(group_by)
    if trunc is None:
        raise ValidationFailedError("Invalid grouping", errors={"group_by": ["Must be day, week or month."]})
    rows = (
        counted_orders(start=start, end=end)
        .annotate(bucket=trunc("created_at"))
        .values("bucket")
        .annotate(total_orders=Count("id"), total_revenue=Sum("total"))
        .order_by("bucket")
    )
    series = []
    for row in rows:
        bucket = row["bucket"]
        if isinstance(bucket, datetime):
            bucket = bucket.date()
        revenue = money(row["total_revenue"] or 0)
        series.append(
            {
                "period": bucket.strftime("%Y-%m") if group_by == "month" else bucket.isoformat(),
                "total_orders": row["total_orders"],
                "total_revenue": revenue,
                "average_order_value": _average(revenue, row["total_orders"]),
            }
        )
    return series


def product_performance(*, sort_by: str = "revenue", limit: int = 10) -> list[dict]:
    rows = top_products(counted_orders(), sort_by=sort_by, limit=limit)
    ratings = {
        p["id"]: p
        for p in Product.objects.filter(id__in=[r["product_id"] for r in rows]).values(
            "id", "average_rating", "review_count"
        )
    }
    for row in rows:
        product = ratings.get(row["product_id"], {})
        row["average_rating"] = product.get("average_rating", Decimal("0.00"))
        row["review_count"] = product.get("review_count", 0)
    return rows


def customer_stats(*, start: Optional[datetime] = None, end: Optional[datetime] = None) -> dict:
    customers = get_user_model().objects.filter(is_staff=False)
    new_customers = customers
    if start is not None:
        new_customers = new_customers.filter(date_joined__gte=start)
    if end is not None:
        new_customers = new_customers.filter(date_joined__lte=end)

    per_customer = counted_orders(start=start, end=end).values("user_id").annotate(
        order_count=Count("id"), spent=Sum("total")
    )
    spent = [row["spent"] or Decimal("0") for row in per_customer]
    return {
        "new_customers": new_customers.count(),
        "total_customers": customers.count(),
        "repeat_customers": sum(1 for row in per_customer if row["order_count"] > 1),
        "average_lifetime_value": _average(sum(spent, Decimal("0")), len(spent)),
    }
