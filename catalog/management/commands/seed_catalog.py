"""Seed a small catalog for local development.

Creates a few categories, published products with opening stock recorded
in the inventory ledger, and a sample coupon. Re-running is idempotent;
existing rows are reused by slug or code.
"""

from decimal import Decimal

from catalog.models import Category, Product
from common.choices import DiscountType, LogType, ReferenceType
from coupons.models import Coupon
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify
from inventory.services import adjust_stock

CATEGORIES = [
    ("Kitchen", "Cookware, mugs and tableware"),
    ("Lighting", "Lamps and bulbs"),
    ("Textiles", "Throws, cushions and linen"),
]

PRODUCTS = [
    {
        "title": "Stoneware Mug",
        "sku": "KIT-MUG-001",
        "price": Decimal("25.00"),
        "stock": 40,
        "category": "kitchen",
        "images": ["https://images.example.com/stoneware-mug.jpg"],
        "is_featured": True,
    },
    {
        "title": "Cast Iron Skillet",
        "sku": "KIT-SKL-001",
        "price": Decimal("59.00"),
        "compare_at_price": Decimal("79.00"),
        "stock": 12,
        "category": "kitchen",
        "images": ["https://images.example.com/skillet.jpg"],
    },
    {
        "title": "Brass Desk Lamp",
        "sku": "LGT-LMP-001",
        "price": Decimal("120.00"),
        "stock": 5,
        "category": "lighting",
        "images": ["https://images.example.com/desk-lamp.jpg"],
    },
    {
        "title": "Wool Throw",
        "sku": "TXT-THR-001",
        "price": Decimal("85.00"),
        "stock": 0,
        "category": "textiles",
        "images": [],
    },
]


class Command(BaseCommand):
    help = "Seed development catalog data (categories, products with stock, a coupon)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding catalog data...")

        categories = {}
        for index, (name, description) in enumerate(CATEGORIES):
            category, _ = Category.objects.get_or_create(
                slug=slugify(name), defaults={"name": name, "description": description, "sort_order": index}
            )
            categories[category.slug] = category

        for row in PRODUCTS:
            data = dict(row)
            stock = data.pop("stock")
            category = categories[data.pop("category")]
            product, created = Product.objects.get_or_create(
                sku=data["sku"],
                defaults={**data, "slug": slugify(data["title"]), "status": Product.STATUS_PUBLISHED},
            )
            product.categories.add(category)
            if created and stock:
                adjust_stock(
                    product_id=product.id,
                    delta=stock,
                    log_type=LogType.IN,
                    reason="Seed stock",
                    reference_type=ReferenceType.RESTOCK,
                )
            self.stdout.write(f"  {'created' if created else 'exists '} {product.sku} {product.title}")

        Coupon.objects.get_or_create(
            code="WELCOME10",
            defaults={"type": DiscountType.PERCENTAGE, "value": Decimal("10"), "description": "10% off first order"},
        )
        self.stdout.write(self.style.SUCCESS("Catalog seeded."))
