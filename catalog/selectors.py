"""Selectors for the catalog domain.

Expose read-only query helpers to keep views thin and allow reuse across
APIs and services. Selectors should return querysets or lightweight data
structures and avoid side effects.
"""

from typing import Iterable, Optional

from django.db.models import Q, QuerySet

from .models import Category, Product


def list_categories(ordering: Optional[Iterable[str]] = None) -> QuerySet[Category]:
    """Return active categories ordered by the provided fields.

    Defaults to sorting by ``sort_order`` then ``name``.
    """

    ordering = list(ordering or ("sort_order", "name"))
    return Category.objects.filter(is_active=True).order_by(*ordering)


def list_products(
    *,
    category_slug: Optional[str] = None,
    status: Optional[str] = None,
    featured: Optional[bool] = None,
    in_stock: Optional[bool] = None,
    search: Optional[str] = None,
    ordering: Optional[Iterable[str]] = None,
) -> QuerySet[Product]:
    """Return products with common filters and categories prefetched."""

    qs = Product.objects.all().prefetch_related("categories")

    if category_slug:
        qs = qs.filter(categories__slug=category_slug)
    if status:
        qs = qs.filter(status=status)
    if featured is not None:
        qs = qs.filter(is_featured=featured)
    if in_stock is True:
        qs = qs.filter(stock__gt=0)
    elif in_stock is False:
        qs = qs.filter(stock=0)
    if search:
        qs = qs.filter(Q(title__icontains=search) | Q(description__icontains=search) | Q(brand__icontains=search))

    ordering = list(ordering or ("title",))
    return qs.order_by(*ordering).distinct()


def list_published_products() -> QuerySet[Product]:
    return list_products(status=Product.STATUS_PUBLISHED)


def get_published_product(product_id: int) -> Optional[Product]:
    try:
        return Product.objects.get(pk=product_id, status=Product.STATUS_PUBLISHED)
    except Product.DoesNotExist:
        return None

