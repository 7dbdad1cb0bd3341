"""Catalog write services: product imagery."""

import logging

from common.errors import AssetStoreError
from django.db import transaction

from .assets import AssetStore, delete_assets_quietly, get_asset_store
from .models import Product

logger = logging.getLogger("storefront.catalog")


def add_product_image(*, product: Product, file, store: AssetStore | None = None) -> Product:
    """Upload an image and append its URL to the product's gallery.

    Upload failures raise `AssetStoreError` and leave the product untouched.
    """

    store = store or get_asset_store()
    try:
        url = store.upload(file, folder=f"products/{product.id}")
    except AssetStoreError as exc:
        logger.error(
            "product_image_upload_failed",
            extra={"event": "product_image_upload_failed", "product_id": product.id, "error": str(exc)},
        )
        raise
    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        locked.images = [*locked.images, url]
        locked.save(update_fields=["images", "updated_at"])
    logger.info("product_image_added", extra={"event": "product_image_added", "product_id": product.id, "url": url})
    return locked


def remove_product_image(*, product: Product, url: str, store: AssetStore | None = None) -> Product:
    """Detach an image URL from the product, then delete the asset best-effort."""

    with transaction.atomic():
        locked = Product.objects.select_for_update().get(pk=product.pk)
        if url not in locked.images:
            return locked
        locked.images = [u for u in locked.images if u != url]
        locked.save(update_fields=["images", "updated_at"])
    transaction.on_commit(lambda: delete_assets_quietly([url], store=store))
    return locked
