"""Image/asset store collaborator.

The catalog only needs two operations from whatever hosts product imagery:
upload a file and get back a public URL, and delete a previously uploaded
asset. `get_asset_store()` returns the implementation named by the
`ASSET_STORE` setting.
"""

import logging
import posixpath
import uuid
from abc import ABC, abstractmethod

from common.errors import AssetStoreError
from django.conf import settings
from django.core.files.storage import default_storage
from django.utils.module_loading import import_string

logger = logging.getLogger("storefront.catalog")


class AssetStore(ABC):
    """Abstract asset store interface."""

    @abstractmethod
    def upload(self, file, *, folder: str = "products") -> str:
        """Store `file` and return its public URL."""

    @abstractmethod
    def delete(self, asset_ref: str) -> None:
        """Remove a stored asset given the URL returned by `upload`."""


class StorageAssetStore(AssetStore):
    """Asset store backed by Django's configured default storage."""

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def upload(self, file, *, folder: str = "products") -> str:
        ext = posixpath.splitext(getattr(file, "name", "") or "")[1].lower()
        name = posixpath.join(folder, f"{uuid.uuid4().hex}{ext}")
        try:
            saved = self.storage.save(name, file)
            return self.storage.url(saved)
        except Exception as exc:
            raise AssetStoreError(str(exc)) from exc

    def delete(self, asset_ref: str) -> None:
        name = self._name_from_url(asset_ref)
        try:
            if name and self.storage.exists(name):
                self.storage.delete(name)
        except Exception as exc:
            raise AssetStoreError(str(exc)) from exc

    def _name_from_url(self, url: str) -> str:
        prefix = getattr(settings, "MEDIA_URL", "") or ""
        if prefix and url.startswith(prefix):
            return url[len(prefix) :]
        return url.lstrip("/")


_current_store: AssetStore | None = None


def get_asset_store() -> AssetStore:
    global _current_store
    if _current_store is None:
        path = getattr(settings, "ASSET_STORE", "catalog.assets.StorageAssetStore")
        _current_store = import_string(path)()
    return _current_store


def set_asset_store(store: AssetStore | None) -> None:
    """Override the active asset store (tests); `None` resets to settings."""
    global _current_store
    _current_store = store


def delete_assets_quietly(urls, *, store: AssetStore | None = None) -> None:
    """Best-effort removal of assets; failures are logged, never raised."""

    store = store or get_asset_store()
    for url in urls:
        try:
            store.delete(url)
        except AssetStoreError:
            logger.warning("asset_delete_failed", extra={"event": "asset_delete_failed", "url": url})
