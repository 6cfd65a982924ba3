# batches/management/commands/expire_batches.py

"""
EXPIRY SWEEP (ADMINISTRATIVE)

Purpose:
- Mark ACTIVE batches whose exp_date is before --as-of (default: today) as EXPIRED.

Rules:
- Quantity is never touched.
- Idempotent: rerunning is safe.
- Supports --dry-run and --product for safe iteration.
- Never run implicitly by the expiry scanner; schedule it explicitly (cron) if wanted.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from batches.services import BatchStoreError, expire_batches


class Command(BaseCommand):
    help = "Mark Active batches expiring on or before --as-of (default today) as Expired."

    def add_arguments(self, parser):
        parser.add_argument(
            "--as-of",
            type=str,
            default="",
            help="Cut-off date YYYY-MM-DD (default: today). Batches with exp_date on or before it are expired.",
        )
        parser.add_argument(
            "--product",
            type=int,
            default=None,
            help="Only sweep batches of this product id.",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report how many batches would change without saving.",
        )

    def handle(self, *args, **options):
        as_of = (options.get("as_of") or "").strip() or None
        product_id = options.get("product")
        dry_run = bool(options.get("dry_run"))

        try:
            count = expire_batches(as_of, product_id=product_id, dry_run=dry_run)
        except ValidationError as exc:
            raise CommandError("; ".join(exc.messages)) from exc
        except BatchStoreError as exc:
            raise CommandError(str(exc)) from exc

        if dry_run:
            self.stdout.write(f"DRY RUN: {count} batch(es) would be marked Expired.")
            return

        self.stdout.write(self.style.SUCCESS(f"{count} batch(es) marked Expired."))
