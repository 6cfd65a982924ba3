# batches/services/batch_numbers.py

"""
BATCH NUMBER GENERATOR

Format:  P{productId}-{YYYYMMDD}-{seq:03d}
- date  = production date when known, else today (local date)
- seq   = number of existing batch numbers with that prefix + 1

Count-then-format can race under concurrent receiving. The unique constraint
(product, batch_number) catches the collision and receiving retries with the
next `attempt`. If the store cannot be read at all we return the timestamp
fallback P{productId}-{epochMillis} so a receipt is never blocked.
"""

from __future__ import annotations

import logging
import re

from django.db import DatabaseError, transaction
from django.utils import timezone

from .repository import get_default_repository

logger = logging.getLogger(__name__)

GENERATED_BATCH_NUMBER_RE = re.compile(r"^P(?P<product_id>\d+)-(?P<day>\d{8})-(?P<seq>\d{3,})$")
FALLBACK_BATCH_NUMBER_RE = re.compile(r"^P(?P<product_id>\d+)-(?P<millis>\d{10,})$")


def batch_number_prefix(product_id: int, prod_date=None) -> str:
    effective = prod_date or timezone.localdate()
    return f"P{product_id}-{effective:%Y%m%d}-"


def fallback_batch_number(product_id: int) -> str:
    millis = int(timezone.now().timestamp() * 1000)
    return f"P{product_id}-{millis}"


def generate_batch_number(product_id: int, prod_date=None, *, attempt: int = 0, repository=None) -> str:
    """
    Return the next batch number for (product, date).

    `attempt` > 0 skips ahead past a number that just collided.
    """
    repository = repository or get_default_repository()
    prefix = batch_number_prefix(product_id, prod_date)

    try:
        # savepoint: a failed read must not poison the caller's transaction
        with transaction.atomic():
            existing = repository.count_batch_numbers_with_prefix(product_id, prefix)
    except DatabaseError as exc:
        fallback = fallback_batch_number(product_id)
        logger.warning(
            "Batch number store unavailable; using timestamp fallback",
            extra={"product_id": product_id, "prefix": prefix, "fallback": fallback, "error": str(exc)},
        )
        return fallback

    seq = int(existing) + 1 + max(0, int(attempt))
    return f"{prefix}{seq:03d}"


def is_generated_batch_number(value) -> bool:
    """True for P{id}-{YYYYMMDD}-{seq} numbers (not timestamp fallbacks or supplier labels)."""
    if not isinstance(value, str):
        return False
    return bool(GENERATED_BATCH_NUMBER_RE.match(value.strip()))


def is_fallback_batch_number(value) -> bool:
    if not isinstance(value, str):
        return False
    return bool(FALLBACK_BATCH_NUMBER_RE.match(value.strip()))
