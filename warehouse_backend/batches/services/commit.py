# batches/services/commit.py

"""
ALLOCATION COMMITTER

Applies a plan's lines to the store in ONE transaction.

CONCURRENCY (commit is the serialization point, not planning):
- Touched rows are locked with SELECT ... FOR UPDATE in ascending id order
- Each line is re-validated against the locked row (Active, quantity >= line)
- The write itself is a compare-and-set on the observed quantity
- Any failed line raises AllocationConflictError and NOTHING is written

Per line:
    new_quantity = max(0, quantity - consumed)
    status       = Depleted if new_quantity == 0 else Active
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction

from batches.domain.results import AllocationLine, BatchUpdateResult
from batches.models import ProductBatch

from .exceptions import AllocationConflictError, BatchNotFoundError, BatchStoreError
from .repository import get_default_repository
from .validation import to_positive_int

logger = logging.getLogger(__name__)


def _normalize_lines(lines) -> list[tuple[int, int]]:
    """
    Accepts AllocationLine objects or {"batch_id", "quantity"} mappings.
    Repeated batch ids are merged (quantities summed), first-seen order kept.
    """
    merged: dict[int, int] = {}

    for line in lines or []:
        if isinstance(line, AllocationLine):
            raw_id, raw_qty = line.batch_id, line.quantity
        elif isinstance(line, Mapping):
            raw_id, raw_qty = line.get("batch_id"), line.get("quantity")
        else:
            raise ValidationError({"lines": "each line needs batch_id and quantity"})

        batch_id = to_positive_int(raw_id, field="batch_id")
        qty = to_positive_int(raw_qty)
        merged[batch_id] = merged.get(batch_id, 0) + qty

    if not merged:
        raise ValidationError({"lines": "at least one allocation line is required"})
    return list(merged.items())


def _conflict(batch, required: int, available=None) -> AllocationConflictError:
    if available is None:
        available = int(batch.quantity) if batch.status == ProductBatch.Status.ACTIVE else 0
    return AllocationConflictError(
        batch_id=batch.id,
        product_id=batch.product_id,
        required_quantity=required,
        available_quantity=available,
    )


def commit_allocation(lines, *, repository=None) -> list[BatchUpdateResult]:
    repository = repository or get_default_repository()
    wanted = _normalize_lines(lines)

    try:
        with transaction.atomic():
            locked = repository.lock_batches(batch_id for batch_id, _ in wanted)

            missing = [batch_id for batch_id, _ in wanted if batch_id not in locked]
            if missing:
                raise BatchNotFoundError(missing)

            results = []
            for batch_id, qty in wanted:
                batch = locked[batch_id]
                current = int(batch.quantity)

                if batch.status != ProductBatch.Status.ACTIVE or current < qty:
                    raise _conflict(batch, qty)

                new_quantity = max(0, current - qty)
                new_status = (
                    ProductBatch.Status.DEPLETED if new_quantity == 0 else ProductBatch.Status.ACTIVE
                )

                swapped = repository.compare_and_set_quantity(
                    batch_id=batch_id,
                    expected_quantity=current,
                    new_quantity=new_quantity,
                    new_status=new_status,
                )
                if not swapped:
                    fresh = repository.get_batches([batch_id]).get(batch_id, batch)
                    raise _conflict(fresh, qty)

                results.append(
                    BatchUpdateResult(
                        batch_id=batch_id,
                        batch_number=batch.batch_number,
                        previous_quantity=current,
                        consumed=qty,
                        new_quantity=new_quantity,
                        status=str(new_status),
                    )
                )
    except AllocationConflictError as exc:
        logger.warning(
            "Allocation commit rejected: stale plan",
            extra={
                "batch_id": exc.batch_id,
                "product_id": exc.product_id,
                "required": exc.required_quantity,
                "available": exc.available_quantity,
            },
        )
        raise
    except DatabaseError as exc:
        logger.exception("Allocation commit failed", extra={"lines": len(wanted)})
        raise BatchStoreError("allocation commit") from exc

    logger.info(
        "Allocation committed",
        extra={
            "batches": [r.batch_id for r in results],
            "consumed": sum(r.consumed for r in results),
            "depleted": [r.batch_id for r in results if r.new_quantity == 0],
        },
    )
    return results
