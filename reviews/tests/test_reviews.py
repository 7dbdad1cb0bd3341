from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, stocked_product
from common.choices import OrderStatus
from orders.models import Order
from orders.tests.factories import place_order
from rest_framework.test import APIClient
from reviews.models import Review
from reviews.services import approve_review, create_review
from users.tests.factories import AdminUserFactory, UserFactory

REVIEW = {"rating": 4, "title": "Solid", "comment": "Does what it says."}


def _client(user=None):
    client = APIClient()
    if user is not None:
        client.force_authenticate(user=user)
    return client


def _delivered(user, product):
    order = place_order(user, (product, 1))
    Order.objects.filter(pk=order.pk).update(status=OrderStatus.DELIVERED)
    return order


def _url(product):
    return f"/api/v1/reviews/products/{product.id}/"


@pytest.mark.django_db
def test_verified_purchase_is_published_and_rated():
    user = UserFactory()
    product = stocked_product(5)
    order = _delivered(user, product)

    r = _client(user).post(_url(product), REVIEW, format="json")
    assert r.status_code == 201
    body = r.json()
    assert body["is_verified_purchase"] is True
    assert body["is_approved"] is True
    assert Review.objects.get(pk=body["id"]).order_id == order.id

    product.refresh_from_db()
    assert product.review_count == 1
    assert product.average_rating == Decimal("4.0")


@pytest.mark.django_db
def test_unverified_review_waits_for_approval():
    product = ProductFactory()
    r = _client(UserFactory()).post(_url(product), {**REVIEW, "rating": 2}, format="json")
    assert r.status_code == 201
    assert r.json()["is_approved"] is False

    assert _client().get(_url(product)).json()["results"] == []
    product.refresh_from_db()
    assert product.review_count == 0

    admin = _client(AdminUserFactory())
    r_approve = admin.put(f"/api/v1/reviews/admin/{r.json()['id']}/approve/")
    assert r_approve.status_code == 200
    assert r_approve.json()["is_approved"] is True
    assert [row["id"] for row in _client().get(_url(product)).json()["results"]] == [r.json()["id"]]
    product.refresh_from_db()
    assert (product.review_count, product.average_rating) == (1, Decimal("2.0"))


@pytest.mark.django_db
def test_average_rating_rounds_to_one_decimal():
    product = stocked_product(10)
    for rating in (5, 4, 4):
        user = UserFactory()
        _delivered(user, product)
        create_review(user=user, product_id=product.id, rating=rating, title="t", comment="c")
    product.refresh_from_db()
    assert product.review_count == 3
    assert product.average_rating == Decimal("4.3")


@pytest.mark.django_db
def test_one_review_per_product():
    user = UserFactory()
    product = ProductFactory()
    client = _client(user)
    assert client.post(_url(product), REVIEW, format="json").status_code == 201

    r = client.post(_url(product), REVIEW, format="json")
    assert r.status_code == 409
    assert r.json()["code"] == "already_reviewed"


@pytest.mark.django_db
def test_create_validates_input_and_product():
    client = _client(UserFactory())
    product = ProductFactory()

    r_bad = client.post(_url(product), {**REVIEW, "rating": 6}, format="json")
    assert r_bad.status_code == 400
    assert "rating" in r_bad.json()

    draft = ProductFactory(status="draft")
    assert client.post(_url(draft), REVIEW, format="json").status_code == 404
    assert _client().get("/api/v1/reviews/products/999999/").status_code == 404
    assert _client().post(_url(product), REVIEW, format="json").status_code == 401


@pytest.mark.django_db
def test_owner_updates_and_rating_follows():
    owner = UserFactory()
    product = stocked_product(5)
    _delivered(owner, product)
    review = create_review(user=owner, product_id=product.id, rating=5, title="Great", comment="Love it")

    r = _client(owner).patch(f"/api/v1/reviews/{review.id}/", {"rating": 3}, format="json")
    assert r.status_code == 200
    assert (r.json()["rating"], r.json()["title"]) == (3, "Great")
    product.refresh_from_db()
    assert product.average_rating == Decimal("3.0")

    stranger = _client(UserFactory()).patch(f"/api/v1/reviews/{review.id}/", {"rating": 1}, format="json")
    assert stranger.status_code == 404


@pytest.mark.django_db
def test_delete_by_owner_or_staff_only():
    product = stocked_product(5)
    owner, other = UserFactory(), UserFactory()
    _delivered(owner, product)
    _delivered(other, product)
    mine = create_review(user=owner, product_id=product.id, rating=5, title="a", comment="a")
    theirs = create_review(user=other, product_id=product.id, rating=1, title="b", comment="b")

    assert _client(owner).delete(f"/api/v1/reviews/{theirs.id}/").status_code == 404
    assert _client(owner).delete(f"/api/v1/reviews/{mine.id}/").status_code == 204
    product.refresh_from_db()
    assert (product.review_count, product.average_rating) == (1, Decimal("1.0"))

    assert _client(AdminUserFactory()).delete(f"/api/v1/reviews/{theirs.id}/").status_code == 204
    product.refresh_from_db()
    assert (product.review_count, product.average_rating) == (0, Decimal("0.0"))


@pytest.mark.django_db
def test_mark_helpful_counts_approved_reviews_only():
    product = stocked_product(5)
    author = UserFactory()
    _delivered(author, product)
    published = create_review(user=author, product_id=product.id, rating=4, title="t", comment="c")
    pending = create_review(user=UserFactory(), product_id=product.id, rating=4, title="t", comment="c")
    client = _client(UserFactory())

    assert client.post(f"/api/v1/reviews/{published.id}/helpful/").json() == {"helpful_count": 1}
    assert client.post(f"/api/v1/reviews/{published.id}/helpful/").json() == {"helpful_count": 2}
    assert client.post(f"/api/v1/reviews/{pending.id}/helpful/").status_code == 404


@pytest.mark.django_db
def test_admin_list_and_approve_is_idempotent():
    product = ProductFactory()
    pending = create_review(user=UserFactory(), product_id=product.id, rating=3, title="t", comment="c")
    assert _client(UserFactory()).get("/api/v1/reviews/admin/all/").status_code == 403

    admin = _client(AdminUserFactory())
    (row,) = admin.get("/api/v1/reviews/admin/all/?is_approved=false").json()["results"]
    assert row["id"] == pending.id
    assert row["product_title"] == product.title
    assert admin.get("/api/v1/reviews/admin/all/?is_approved=true").json()["results"] == []

    approve_review(pending)
    approve_review(pending)
    product.refresh_from_db()
    assert product.review_count == 1
