from decimal import Decimal

import factory
from catalog.models import Category, Product
from common.choices import LogType, ReferenceType
from factory import Faker
from factory.django import DjangoModelFactory


class CategoryFactory(DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: o.name.lower().replace(" ", "-"))
    description = Faker("sentence")
    is_active = True
    sort_order = 0


class ProductFactory(DjangoModelFactory):
    """Published product. `stock` set here bypasses the ledger.

    Use `stocked_product` when a test needs the ledger to agree with stock.
    """

    class Meta:
        model = Product

    title = factory.Sequence(lambda n: f"Product {n}")
    slug = factory.LazyAttribute(lambda o: "-".join(o.title.lower().split()))
    sku = factory.Sequence(lambda n: f"SKU-{n:05d}")
    description = Faker("paragraph")
    status = Product.STATUS_PUBLISHED
    price = Decimal("10.00")
    stock = 0
    images = factory.LazyAttribute(lambda o: [f"https://cdn.example.com/{o.slug}.jpg"])

    @factory.post_generation
    def categories(self, create, extracted, **kwargs):
        if not create:
            return
        if extracted:
            for cat in extracted:
                self.categories.add(cat)


def stocked_product(stock: int, **kwargs) -> Product:
    """Create a product whose opening stock is recorded in the ledger."""

    from inventory.services import adjust_stock

    product = ProductFactory(stock=0, **kwargs)
    if stock:
        adjust_stock(
            product_id=product.id,
            delta=stock,
            log_type=LogType.IN,
            reason="Initial stock",
            reference_type=ReferenceType.RESTOCK,
        )
        product.refresh_from_db()
    return product
