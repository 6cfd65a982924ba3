# batches/management/commands/scan_expiring.py

"""
EXPIRY SCAN REPORT

Read-only: lists Active batches expiring within --days, grouped by urgency.
Intended for schedulers that feed dashboards or notifications.
"""

from __future__ import annotations

import json

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from batches.domain.results import ExpiryUrgency
from batches.services import BatchStoreError, scan_expiring


class Command(BaseCommand):
    help = "List Active batches expiring within N days (critical / high / medium)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Look-ahead window in days (default: INVENTORY EXPIRY_SCAN_DEFAULT_DAYS).",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Print the full result as JSON.",
        )

    def handle(self, *args, **options):
        try:
            result = scan_expiring(options.get("days"))
        except ValidationError as exc:
            raise CommandError("; ".join(exc.messages)) from exc
        except BatchStoreError as exc:
            raise CommandError(str(exc)) from exc

        if options.get("json"):
            self.stdout.write(json.dumps(result.to_dict(), indent=2))
            return

        self.stdout.write(
            f"Expiring within {result.days_ahead} day(s) of {result.as_of.isoformat()}: "
            f"{len(result.entries)} batch(es)"
        )

        for urgency in ExpiryUrgency:
            entries = result.by_urgency(urgency)
            if not entries:
                continue

            self.stdout.write(f"\n[{urgency.value.upper()}]")
            for e in entries:
                self.stdout.write(
                    f"  {e.exp_date.isoformat()} ({e.days_until_expiry}d)  "
                    f"{e.product_sku} {e.product_name}  batch={e.batch_number}  qty={e.quantity}"
                )
