from .base import *  # noqa
from .base import BASE_DIR
from .base import REST_FRAMEWORK as BASE_REST_FRAMEWORK

DEBUG = False

# Use a local SQLite database for reliability and speed in tests
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "test_db.sqlite3",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

# Capture outgoing mail in django.core.mail.outbox
EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
FRONTEND_URL = "https://shop.example.com"

CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache"}}

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Deterministic store policy
STORE_CURRENCY = "usd"
ORDER_TAX_RATE = "0.10"
SHIPPING_FLAT_RATE = "0.00"
FREE_SHIPPING_THRESHOLD = ""
ORDER_NUMBER_MAX_ATTEMPTS = 5

PAYMENT_GATEWAY = "payments.gateway.fake.FakeGateway"
PAYMENT_WEBHOOK_SECRET = "whsec_test"
PAYMENT_WEBHOOK_TOLERANCE_SECONDS = 300
ASSET_STORE = "catalog.assets.StorageAssetStore"

# Relax throttling for tests to reduce flakiness; throttle tests lower single scopes
REST_FRAMEWORK = {**BASE_REST_FRAMEWORK}
REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {
    scope: "1000/min" for scope in BASE_REST_FRAMEWORK.get("DEFAULT_THROTTLE_RATES", {})
}
