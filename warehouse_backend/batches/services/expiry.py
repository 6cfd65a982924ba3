# batches/services/expiry.py

"""
EXPIRY SCANNER + ADMINISTRATIVE SWEEP

scan_expiring():
- READ-ONLY. Active batches with stock and exp_date in [today, today + days_ahead]
- ordered by exp_date, joined with product identity
- urgency: critical (<= EXPIRY_CRITICAL_DAYS), high (<= EXPIRY_HIGH_DAYS), else medium
- empty result = no matches; a failed query raises BatchStoreError

expire_batches():
- explicit admin action: Active batches with exp_date <= as_of become Expired
- quantity is never touched
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from batches.conf import inventory_setting
from batches.domain.results import ExpiryAlertEntry, ExpiryScanResult, ExpiryUrgency

from .exceptions import BatchStoreError
from .repository import get_default_repository
from .validation import to_calendar_date

logger = logging.getLogger(__name__)


def urgency_for(days_until_expiry: int) -> ExpiryUrgency:
    if days_until_expiry <= inventory_setting("EXPIRY_CRITICAL_DAYS"):
        return ExpiryUrgency.CRITICAL
    if days_until_expiry <= inventory_setting("EXPIRY_HIGH_DAYS"):
        return ExpiryUrgency.HIGH
    return ExpiryUrgency.MEDIUM


def _days_ahead(value) -> int:
    if value is None or value == "":
        return inventory_setting("EXPIRY_SCAN_DEFAULT_DAYS")

    if isinstance(value, bool):
        raise ValidationError({"days": "days must be a whole number"})

    try:
        days = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError({"days": "days must be a whole number"}) from exc

    max_days = inventory_setting("EXPIRY_SCAN_MAX_DAYS")
    if days < 0 or days > max_days:
        raise ValidationError({"days": f"days must be between 0 and {max_days}"})
    return days


def scan_expiring(days_ahead=None, *, repository=None, today=None) -> ExpiryScanResult:
    repository = repository or get_default_repository()
    days = _days_ahead(days_ahead)
    today = today or timezone.localdate()
    horizon = today + timedelta(days=days)

    try:
        batches = repository.expiring_batches(today, horizon)
    except DatabaseError as exc:
        logger.exception("Expiry scan failed", extra={"days_ahead": days})
        raise BatchStoreError("expiry scan") from exc

    entries = []
    for batch in batches:
        remaining_days = (batch.exp_date - today).days
        entries.append(
            ExpiryAlertEntry(
                batch_id=batch.id,
                batch_number=batch.batch_number,
                product_id=batch.product_id,
                product_name=batch.product.name,
                product_sku=batch.product.sku,
                quantity=int(batch.quantity),
                exp_date=batch.exp_date,
                days_until_expiry=remaining_days,
                urgency=urgency_for(remaining_days),
            )
        )

    return ExpiryScanResult(as_of=today, days_ahead=days, entries=tuple(entries))


def expire_batches(as_of=None, *, product_id=None, dry_run: bool = False, repository=None) -> int:
    """
    Flip Active batches whose expiry date is on or before as_of to Expired.
    A batch expiring today counts as expired, matching the EXPIRED_STOCK rule.
    Returns the number of batches affected (or that would be, with dry_run).
    """
    repository = repository or get_default_repository()
    as_of = to_calendar_date(as_of, field="as_of") or timezone.localdate()

    try:
        if dry_run:
            return repository.count_expirable(as_of, product_id)

        with transaction.atomic():
            count = repository.mark_expired(as_of, product_id)
    except DatabaseError as exc:
        logger.exception("Expiry sweep failed", extra={"as_of": str(as_of)})
        raise BatchStoreError("expiry sweep") from exc

    logger.info(
        "Expiry sweep complete",
        extra={"as_of": str(as_of), "product_id": product_id, "expired": count},
    )
    return count
