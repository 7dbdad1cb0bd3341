import pytest
from django.db import IntegrityError
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_email_is_normalized_on_save():
    user = UserFactory(username="mixed", email="  Mixed.Case@Example.COM ")
    user.refresh_from_db()
    assert user.email == "mixed.case@example.com"


@pytest.mark.django_db
def test_email_is_unique_after_normalization():
    UserFactory(username="a", email="shopper@example.com")
    with pytest.raises(IntegrityError):
        UserFactory(username="b", email="SHOPPER@example.com")


@pytest.mark.django_db
def test_display_name_falls_back_to_email():
    assert UserFactory(first_name="Ada", last_name="Lovelace").display_name == "Ada Lovelace"
    assert UserFactory(username="anon", first_name="", last_name="").display_name == "anon@example.com"
