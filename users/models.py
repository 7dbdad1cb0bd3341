"""User model for storefront accounts.

Customers and staff share one model; `is_staff` marks administrators. Token
issuance lives outside this service, so only identity and contact data are
kept here.
"""

from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models


class User(AbstractUser):
    """Custom user with a unique, normalized email and optional phone."""

    email = models.EmailField(unique=True)
    phone = models.CharField(
        max_length=16,
        blank=True,
        validators=[RegexValidator(r"^\+?[1-9]\d{1,14}$", message="Use E.164 format (e.g., +14155552671)")],
        help_text="Primary contact number for the account in E.164 format",
    )

    def save(self, *args, **kwargs):
        if self.email:
            self.email = self.email.strip().lower()
        if self.phone:
            self.phone = self.phone.strip()
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.email or self.username
