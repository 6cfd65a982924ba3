# batches/services/conflicts.py

"""
CONFLICT DETECTOR

Compares a proposed receipt's (prod_date, exp_date) against every ACTIVE batch
of the product that still holds stock. Any differing pair produces ONE advisory
DATE_CONFLICT alert listing all existing batches.

Advisory only: receiving always proceeds.
"""

from __future__ import annotations

import logging

from django.db import DatabaseError

from batches.domain import alerts as alert_factory
from batches.domain.alerts import ExistingBatchDates
from batches.domain.results import ConflictCheck

from .exceptions import BatchStoreError
from .repository import get_default_repository
from .validation import to_calendar_date

logger = logging.getLogger(__name__)


def check_conflicts(product_id: int, new_prod_date=None, new_exp_date=None, *, repository=None) -> ConflictCheck:
    repository = repository or get_default_repository()

    new_prod = to_calendar_date(new_prod_date, field="prod_date")
    new_exp = to_calendar_date(new_exp_date, field="exp_date")

    try:
        batches = repository.active_batches(product_id)
    except DatabaseError as exc:
        logger.exception("Conflict check failed", extra={"product_id": product_id})
        raise BatchStoreError("conflict check") from exc

    if not batches:
        return ConflictCheck(has_alert=False)

    existing = tuple(
        ExistingBatchDates(
            batch_id=b.id,
            batch_number=b.batch_number,
            quantity=int(b.quantity),
            prod_date=b.prod_date,
            exp_date=b.exp_date,
            received_date=b.received_date,
        )
        for b in batches
    )

    differs = any((b.prod_date, b.exp_date) != (new_prod, new_exp) for b in existing)
    if not differs:
        return ConflictCheck(has_alert=False, existing_batches=existing)

    alert = alert_factory.date_conflict(
        product_id=product_id,
        new_prod_date=new_prod,
        new_exp_date=new_exp,
        existing_batches=existing,
    )
    logger.warning(
        "Date conflict on receipt",
        extra={
            "product_id": product_id,
            "new_prod_date": str(new_prod),
            "new_exp_date": str(new_exp),
            "existing_batches": len(existing),
        },
    )
    return ConflictCheck(has_alert=True, alert=alert, existing_batches=existing)
