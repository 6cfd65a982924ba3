# batches/services/fifo.py

"""
FIFO ALLOCATOR

Purpose:
- Plan which batches (and how much of each) satisfy a required quantity.
- Planning is READ-ONLY. Nothing is reserved; commit_allocation() applies a plan.

FIFO ORDER (deterministic):
  prod_date asc (nulls last) -> received_date asc -> id asc
Repeated calls against an unchanged store return identical plans.

Shortages are results (can_fulfill=False + NO_STOCK / INSUFFICIENT_STOCK),
never exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils import timezone

from batches.conf import inventory_setting
from batches.domain import alerts as alert_factory
from batches.domain.alerts import BatchPriority, ExpiryDetails
from batches.domain.results import AllocationLine, AllocationPlan
from batches.models import ProductBatch

from .exceptions import BatchNotFoundError, BatchStoreError
from .repository import get_default_repository
from .validation import to_positive_int

logger = logging.getLogger(__name__)

RECOMMEND_FIFO = "Use oldest stock first (FIFO method)"
RECOMMEND_SINGLE = "Single batch available"


def fifo_sort_key(batch):
    return (
        batch.prod_date is None,
        batch.prod_date or date.min,
        batch.received_date,
        batch.id,
    )


def _line_from_batch(batch, quantity: int) -> AllocationLine:
    return AllocationLine(
        batch_id=batch.id,
        product_id=batch.product_id,
        quantity=quantity,
        batch_number=batch.batch_number,
        prod_date=batch.prod_date,
        exp_date=batch.exp_date,
        received_date=batch.received_date,
        cost_price=batch.cost_price,
        supplier_id=batch.supplier_id,
        remaining_in_batch=int(batch.quantity) - quantity,
    )


def plan_alerts(lines, *, today=None) -> list:
    """
    Advisory alerts for a fulfillable plan.

    - MULTIPLE_BATCHES: >1 line AND the lines do not share one (prod_date, exp_date)
    - NEAR_EXPIRY: per line, 0 < days <= NEAR_EXPIRY_DAYS
    - EXPIRED_STOCK: per line, days <= 0 (Active batch past its date)
    """
    today = today or timezone.localdate()
    near_days = inventory_setting("NEAR_EXPIRY_DAYS")
    alerts = []

    cohorts = {(line.prod_date, line.exp_date) for line in lines}
    if len(lines) > 1 and len(cohorts) > 1:
        alerts.append(
            alert_factory.multiple_batches(
                BatchPriority(
                    priority=index,
                    batch_id=line.batch_id,
                    batch_number=line.batch_number,
                    quantity=line.quantity,
                    prod_date=line.prod_date,
                    exp_date=line.exp_date,
                )
                for index, line in enumerate(lines, start=1)
            )
        )

    for line in lines:
        if not line.exp_date:
            continue

        days = (line.exp_date - today).days
        details = ExpiryDetails(
            batch_id=line.batch_id,
            batch_number=line.batch_number,
            quantity=line.quantity,
            exp_date=line.exp_date,
            days_until_expiry=days,
        )

        if days <= 0:
            alerts.append(alert_factory.expired_stock(details))
        elif days <= near_days:
            alerts.append(alert_factory.near_expiry(details))

    return alerts


def _load_active(repository, product_id, operation):
    try:
        batches = repository.active_batches(product_id)
    except DatabaseError as exc:
        logger.exception("Batch store read failed", extra={"product_id": product_id, "operation": operation})
        raise BatchStoreError(operation) from exc
    return sorted(batches, key=fifo_sort_key)


def _greedy_lines(batches, required: int) -> list[AllocationLine]:
    lines = []
    remaining = required

    for batch in batches:
        if remaining <= 0:
            break

        available = int(batch.quantity or 0)
        if available <= 0:
            continue

        take = min(available, remaining)
        lines.append(_line_from_batch(batch, take))
        remaining -= take

    return lines


def allocate(product_id: int, required_quantity, *, repository=None, today=None) -> AllocationPlan:
    """
    Plan a FIFO allocation of `required_quantity` units of a product.
    """
    repository = repository or get_default_repository()
    required = to_positive_int(required_quantity)

    batches = _load_active(repository, product_id, "allocation planning")

    if not batches:
        return AllocationPlan(
            product_id=product_id,
            can_fulfill=False,
            total_available=0,
            required_quantity=required,
            alerts=(alert_factory.no_stock(product_id),),
        )

    total_available = sum(int(b.quantity) for b in batches)

    if total_available < required:
        return AllocationPlan(
            product_id=product_id,
            can_fulfill=False,
            total_available=total_available,
            required_quantity=required,
            alerts=(
                alert_factory.insufficient_stock(
                    product_id=product_id,
                    required_quantity=required,
                    total_available=total_available,
                ),
            ),
        )

    lines = _greedy_lines(batches, required)
    alerts = plan_alerts(lines, today=today)

    logger.debug(
        "FIFO plan built",
        extra={"product_id": product_id, "required": required, "lines": len(lines)},
    )

    return AllocationPlan(
        product_id=product_id,
        can_fulfill=True,
        total_available=total_available,
        required_quantity=required,
        lines=tuple(lines),
        alerts=tuple(alerts),
        recommendation=RECOMMEND_FIFO if len(batches) > 1 else RECOMMEND_SINGLE,
    )


def _normalize_selections(selections) -> list[tuple[int, int]]:
    normalized = []
    seen = set()

    for item in selections or []:
        if isinstance(item, Mapping):
            raw_id, raw_qty = item.get("batch_id"), item.get("quantity")
        else:
            raw_id, raw_qty = item

        batch_id = to_positive_int(raw_id, field="batch_id")
        qty = to_positive_int(raw_qty)

        if batch_id in seen:
            raise ValidationError({"selections": f"batch {batch_id} selected more than once"})
        seen.add(batch_id)
        normalized.append((batch_id, qty))

    if not normalized:
        raise ValidationError({"selections": "at least one batch must be selected"})
    return normalized


def build_manual_plan(product_id: int, required_quantity, selections, *, repository=None, today=None) -> AllocationPlan:
    """
    Plan from batches picked by hand (warehouse worker override).

    RULES:
    - selections sum exactly to required_quantity
    - every batch belongs to the product, is Active and holds enough quantity
    - lines keep the worker's order; alerts are computed as for FIFO plans
    """
    repository = repository or get_default_repository()
    required = to_positive_int(required_quantity)
    picked = _normalize_selections(selections)

    selected_total = sum(qty for _, qty in picked)
    if selected_total != required:
        raise ValidationError(
            {
                "selections": (
                    f"selected quantity ({selected_total}) must equal required quantity ({required})"
                )
            }
        )

    active = _load_active(repository, product_id, "manual allocation planning")

    try:
        found = repository.get_batches(batch_id for batch_id, _ in picked)
    except DatabaseError as exc:
        raise BatchStoreError("manual allocation planning") from exc

    missing = [batch_id for batch_id, _ in picked if batch_id not in found]
    if missing:
        raise BatchNotFoundError(missing)

    lines = []
    for batch_id, qty in picked:
        batch = found[batch_id]

        if batch.product_id != product_id:
            raise ValidationError({"selections": f"batch {batch_id} does not belong to product {product_id}"})

        if batch.status != ProductBatch.Status.ACTIVE:
            raise ValidationError({"selections": f"batch {batch_id} is {batch.status}, not Active"})

        if int(batch.quantity) < qty:
            raise ValidationError(
                {"selections": f"batch {batch_id} holds {batch.quantity}, cannot take {qty}"}
            )

        lines.append(_line_from_batch(batch, qty))

    fifo_ids = {line.batch_id for line in _greedy_lines(active, required)}
    if fifo_ids == {line.batch_id for line in lines}:
        recommendation = "Manual selection matches FIFO order"
    else:
        recommendation = "Manual selection differs from FIFO order; older stock remains on the shelf"

    logger.info(
        "Manual plan built",
        extra={"product_id": product_id, "required": required, "batches": [b for b, _ in picked]},
    )

    return AllocationPlan(
        product_id=product_id,
        can_fulfill=True,
        total_available=sum(int(b.quantity) for b in active),
        required_quantity=required,
        lines=tuple(lines),
        alerts=tuple(plan_alerts(lines, today=today)),
        recommendation=recommendation,
    )
