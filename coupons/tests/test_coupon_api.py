from decimal import Decimal

import pytest
from coupons.models import Coupon
from coupons.tests.factories import CouponFactory
from rest_framework.test import APIClient
from users.tests.factories import AdminUserFactory, UserFactory


@pytest.mark.django_db
def test_validate_requires_authentication():
    resp = APIClient().post("/api/v1/coupons/validate/", {"code": "X", "cart_total": "10"}, format="json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_validate_returns_discount():
    CouponFactory(code="SAVE20", value=Decimal("20"), max_discount_amount=Decimal("15"))
    client = APIClient()
    client.force_authenticate(user=UserFactory())

    resp = client.post("/api/v1/coupons/validate/", {"code": "save20", "cart_total": "100.00"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["discount"] == "15.00"
    assert resp.json()["code"] == "SAVE20"


@pytest.mark.django_db
def test_validate_error_shape():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    resp = client.post("/api/v1/coupons/validate/", {"code": "NOPE", "cart_total": "10.00"}, format="json")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid coupon code", "code": "coupon_not_found"}


@pytest.mark.django_db
def test_admin_crud():
    client = APIClient()
    client.force_authenticate(user=AdminUserFactory())

    resp = client.post(
        "/api/v1/admin/coupons/",
        {"code": "spring", "type": "fixed", "value": "5.00", "usage_limit": 10},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    coupon_id = resp.json()["id"]
    assert resp.json()["code"] == "SPRING"

    dup = client.post("/api/v1/admin/coupons/", {"code": "Spring", "type": "fixed", "value": "1.00"}, format="json")
    assert dup.status_code == 400

    bad = client.post("/api/v1/admin/coupons/", {"code": "BIG", "type": "percentage", "value": "150"}, format="json")
    assert bad.status_code == 400

    patch = client.patch(f"/api/v1/admin/coupons/{coupon_id}/", {"is_active": False}, format="json")
    assert patch.status_code == 200
    assert patch.json()["is_valid"] is False

    assert client.delete(f"/api/v1/admin/coupons/{coupon_id}/").status_code == 204
    assert not Coupon.objects.filter(pk=coupon_id).exists()


@pytest.mark.django_db
def test_admin_endpoints_forbidden_for_customers():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    assert client.get("/api/v1/admin/coupons/").status_code == 403
