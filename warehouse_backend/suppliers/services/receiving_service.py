# suppliers/services/receiving_service.py

"""
======================================================
PATH: suppliers/services/receiving_service.py
======================================================
SUPPLIER ORDER RECEIVING SERVICE

Receive a SupplierOrder atomically:

1) Lock order
2) Validate status + items
3) Receive every item as ONE ProductBatch (batches.services.receive_batch)
   - received_quantity overrides ordered quantity when set
   - supplier dates, cost and batch number are carried onto the batch
4) Collect every DATE_CONFLICT advisory (product -> list of alerts); they never block
5) Mark order RECEIVED

Any failing item rolls back the whole order: no partial receipts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from batches.services import receive_batch
from suppliers.models import SupplierOrder

logger = logging.getLogger(__name__)


class SupplierReceivingError(ValueError):
    pass


@dataclass(frozen=True)
class SupplierOrderReceipt:
    order: SupplierOrder
    receipts: tuple = ()
    date_conflicts: dict = field(default_factory=dict)

    @property
    def batches(self) -> list:
        return [r.batch for r in self.receipts]


@transaction.atomic
def receive_supplier_order(*, order_id) -> SupplierOrderReceipt:
    try:
        order = (
            SupplierOrder.objects.select_for_update()
            .select_related("supplier")
            .get(id=order_id)
        )
    except SupplierOrder.DoesNotExist as exc:
        raise SupplierReceivingError("Supplier order not found") from exc

    if order.status == SupplierOrder.STATUS_RECEIVED:
        raise SupplierReceivingError("Supplier order already received")

    if order.status != SupplierOrder.STATUS_PENDING:
        raise SupplierReceivingError("Only PENDING supplier orders can be received")

    items = list(order.items.select_related("product").order_by("id"))
    if not items:
        raise SupplierReceivingError("Supplier order has no items")

    receipts = []
    date_conflicts = {}

    for it in items:
        qty = it.quantity_to_receive
        if qty <= 0:
            raise SupplierReceivingError(f"Item {it.id}: nothing to receive")

        try:
            receipt = receive_batch(
                product_id=it.product_id,
                quantity=qty,
                prod_date=it.prod_date,
                exp_date=it.exp_date,
                supplier_id=order.supplier_id,
                supplier_order_id=order.id,
                cost_price=it.cost_price,
                batch_number=it.batch_number or None,
                notes=it.notes,
            )
        except ValidationError as exc:
            raise SupplierReceivingError(
                f"Item {it.id} ({getattr(it.product, 'name', 'product')}): {'; '.join(exc.messages)}"
            ) from exc

        receipts.append(receipt)

        if receipt.conflict.has_alert:
            date_conflicts.setdefault(it.product_id, []).append(receipt.conflict.alert)

    order.status = SupplierOrder.STATUS_RECEIVED
    order.received_at = timezone.now()
    order.save(update_fields=["status", "received_at"])

    logger.info(
        "Supplier order received",
        extra={
            "order_id": order.id,
            "supplier_id": order.supplier_id,
            "batches": len(receipts),
            "date_conflicts": sorted(date_conflicts),
        },
    )

    return SupplierOrderReceipt(
        order=order,
        receipts=tuple(receipts),
        date_conflicts=date_conflicts,
    )
