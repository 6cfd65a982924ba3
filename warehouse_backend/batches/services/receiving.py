# batches/services/receiving.py

"""
RECEIVING (BATCH CREATION PRIMITIVE)

Flow:
1) validate input (quantity, dates, cost, provenance)
2) Conflict Detector -> advisory DATE_CONFLICT (never blocks)
3) batch number: supplier-provided, or generated P{id}-{YYYYMMDD}-{seq}
4) create ProductBatch (quantity == original_quantity, status Active)

Generated numbers are protected by the (product, batch_number) unique
constraint: a collision is retried under a savepoint with the next sequence,
up to BATCH_NUMBER_MAX_RETRIES, then the timestamp fallback is used.
"""

from __future__ import annotations

import logging

from django.core.exceptions import NON_FIELD_ERRORS, ValidationError
from django.db import DatabaseError, IntegrityError, transaction

from batches.conf import inventory_setting
from batches.domain.results import ReceiptResult
from products.models import Product
from suppliers.models import Supplier, SupplierOrder

from .batch_numbers import fallback_batch_number, generate_batch_number
from .conflicts import check_conflicts
from .exceptions import BatchStoreError
from .repository import get_default_repository
from .validation import to_calendar_date, to_cost, to_positive_int, validate_date_pair

logger = logging.getLogger(__name__)


def _resolve_provenance(supplier_id, supplier_order_id):
    supplier = None
    order = None

    if supplier_order_id not in (None, ""):
        order = SupplierOrder.objects.filter(pk=supplier_order_id).first()
        if order is None:
            raise ValidationError({"supplier_order_id": "supplier order not found"})

    if supplier_id not in (None, ""):
        supplier = Supplier.objects.filter(pk=supplier_id).first()
        if supplier is None:
            raise ValidationError({"supplier_id": "supplier not found"})

    if order is not None and supplier is not None and order.supplier_id != supplier.id:
        raise ValidationError(
            {"supplier_order_id": "supplier order belongs to a different supplier"}
        )

    if supplier is not None:
        return supplier.id, (order.id if order else None)
    if order is not None:
        return order.supplier_id, order.id
    return None, None


def _create_with_supplied_number(repository, *, batch_number, fields):
    if repository.batch_number_exists(fields["product_id"], batch_number):
        raise ValidationError(
            {"batch_number": f"batch number {batch_number} already exists for this product"}
        )

    try:
        with transaction.atomic():
            return repository.create_batch(batch_number=batch_number, **fields)
    except IntegrityError as exc:
        raise ValidationError(
            {"batch_number": f"batch number {batch_number} already exists for this product"}
        ) from exc


def _is_number_collision(exc: ValidationError) -> bool:
    errors = getattr(exc, "error_dict", {})
    if "batch_number" in errors:
        return True
    return any(
        e.code in ("unique", "unique_together") for e in errors.get(NON_FIELD_ERRORS, [])
    )


def _create_with_generated_number(repository, *, prod_date, fields):
    product_id = fields["product_id"]
    max_retries = max(1, inventory_setting("BATCH_NUMBER_MAX_RETRIES"))

    for attempt in range(max_retries):
        candidate = generate_batch_number(
            product_id, prod_date, attempt=attempt, repository=repository
        )

        if repository.batch_number_exists(product_id, candidate):
            logger.info(
                "Batch number taken; retrying",
                extra={"product_id": product_id, "candidate": candidate, "attempt": attempt},
            )
            continue

        try:
            with transaction.atomic():
                return repository.create_batch(batch_number=candidate, **fields)
        except (IntegrityError, ValidationError) as exc:
            # a concurrent receipt took the number between the check and the insert
            if isinstance(exc, ValidationError) and not _is_number_collision(exc):
                raise
            logger.info(
                "Batch number collision on insert; retrying",
                extra={"product_id": product_id, "candidate": candidate, "attempt": attempt},
            )

    fallback = fallback_batch_number(product_id)
    logger.warning(
        "Batch number retries exhausted; using timestamp fallback",
        extra={"product_id": product_id, "fallback": fallback},
    )
    with transaction.atomic():
        return repository.create_batch(batch_number=fallback, **fields)


@transaction.atomic
def receive_batch(
    *,
    product_id,
    quantity,
    prod_date=None,
    exp_date=None,
    supplier_id=None,
    supplier_order_id=None,
    cost_price=None,
    batch_number=None,
    notes="",
    repository=None,
) -> ReceiptResult:
    """
    Record one receipt of stock. Returns the batch plus the conflict check
    (ReceiptResult.conflict.has_alert tells the caller to surface DATE_CONFLICT).
    """
    repository = repository or get_default_repository()

    pid = to_positive_int(product_id, field="product_id")
    qty = to_positive_int(quantity)
    prod = to_calendar_date(prod_date, field="prod_date")
    exp = to_calendar_date(exp_date, field="exp_date")
    validate_date_pair(prod, exp)
    cost = to_cost(cost_price)

    product = Product.objects.filter(pk=pid).first()
    if product is None:
        raise ValidationError({"product_id": "product not found"})
    if not product.is_active:
        raise ValidationError({"product_id": "product is inactive"})

    supplier_id, supplier_order_id = _resolve_provenance(supplier_id, supplier_order_id)

    conflict = check_conflicts(pid, prod, exp, repository=repository)

    fields = {
        "product_id": pid,
        "quantity": qty,
        "original_quantity": qty,
        "prod_date": prod,
        "exp_date": exp,
        "supplier_id": supplier_id,
        "supplier_order_id": supplier_order_id,
        "cost_price": cost,
        "notes": (notes or "").strip(),
    }

    supplied = (batch_number or "").strip()

    try:
        if supplied:
            batch = _create_with_supplied_number(repository, batch_number=supplied, fields=fields)
        else:
            batch = _create_with_generated_number(repository, prod_date=prod, fields=fields)
    except DatabaseError as exc:
        logger.exception("Batch receipt failed", extra={"product_id": pid, "quantity": qty})
        raise BatchStoreError("receiving") from exc

    logger.info(
        "Batch received",
        extra={
            "product_id": pid,
            "batch_id": batch.id,
            "batch_number": batch.batch_number,
            "quantity": qty,
            "date_conflict": conflict.has_alert,
        },
    )

    return ReceiptResult(batch=batch, conflict=conflict, number_generated=not supplied)
