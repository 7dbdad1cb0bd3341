"""Purge idempotency records that can no longer be replayed.

Two kinds of rows are removed: keys past `expires_at`, and keys that never
stored a response (the request died mid-flight) older than `--stale-minutes`.
The latter would otherwise answer every retry with 409 until they expire.
"""

import logging
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db.models import Q
from django.utils import timezone
from orders.models import IdempotencyKey

logger = logging.getLogger("storefront.orders")


class Command(BaseCommand):
    help = "Delete expired and abandoned idempotency key records"

    def add_arguments(self, parser):
        parser.add_argument("--stale-minutes", type=int, default=15, help="Age after which in-flight keys are dropped")
        parser.add_argument("--dry-run", action="store_true", help="Only report how many rows would be deleted")

    def handle(self, *args, **options):
        now = timezone.now()
        stale_before = now - timedelta(minutes=options["stale_minutes"])
        qs = IdempotencyKey.objects.filter(
            Q(expires_at__lt=now) | Q(response_code__isnull=True, created_at__lt=stale_before)
        )
        count = qs.count()
        if options["dry_run"]:
            self.stdout.write(f"Would delete {count} idempotency keys.")
            return
        qs.delete()
        logger.info("idempotency_keys_purged", extra={"event": "idempotency_keys_purged", "count": count})
        self.stdout.write(self.style.SUCCESS(f"Deleted {count} idempotency keys."))
