import pytest
from cart.views import CartDetailView
from catalog.tests.factories import ProductFactory
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework.throttling import ScopedRateThrottle
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_cart_detail_throttle_exceeded(monkeypatch):
    cache.clear()
    monkeypatch.setattr(ScopedRateThrottle, "THROTTLE_RATES", {"cart": "2/min"})
    monkeypatch.setattr(CartDetailView, "throttle_classes", [ScopedRateThrottle])

    client = APIClient()
    client.force_authenticate(user=UserFactory())

    assert client.get("/api/v1/cart/").status_code == 200
    assert client.get("/api/v1/cart/").status_code == 200
    assert client.get("/api/v1/cart/").status_code == 429
    cache.clear()


@pytest.mark.django_db
def test_write_scope_is_independent_of_read_scope(monkeypatch):
    cache.clear()
    monkeypatch.setattr(ScopedRateThrottle, "THROTTLE_RATES", {"cart": "1/min", "cart_write": "100/min"})

    client = APIClient()
    client.force_authenticate(user=UserFactory())
    product = ProductFactory(stock=10)

    assert client.get("/api/v1/cart/").status_code == 200
    resp = client.post("/api/v1/cart/items/", {"product_id": product.id, "quantity": 1}, format="json")
    assert resp.status_code == 201
    cache.clear()
