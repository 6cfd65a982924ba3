# batches/services/repository.py

"""
BATCH REPOSITORY

Data-access seam for the batch engine. Every service takes an optional
`repository=` argument and defaults to DjangoBatchRepository, so tests (or a
different store) can inject their own implementation.

RULES:
- Raw ORM only; no business rules here
- DatabaseError propagates; services translate it to BatchStoreError
- lock_batches() must be called inside transaction.atomic()
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from django.utils import timezone

from batches.models import ProductBatch


class BatchRepository(Protocol):
    def active_batches(self, product_id: int) -> list[ProductBatch]:
        ...

    def count_batch_numbers_with_prefix(self, product_id: int, prefix: str) -> int:
        ...

    def batch_number_exists(self, product_id: int, batch_number: str) -> bool:
        ...

    def create_batch(self, **fields) -> ProductBatch:
        ...

    def get_batches(self, batch_ids: Iterable[int]) -> dict[int, ProductBatch]:
        ...

    def lock_batches(self, batch_ids: Iterable[int]) -> dict[int, ProductBatch]:
        ...

    def compare_and_set_quantity(
        self,
        *,
        batch_id: int,
        expected_quantity: int,
        new_quantity: int,
        new_status: str,
    ) -> bool:
        ...

    def expiring_batches(self, start: date, end: date) -> list[ProductBatch]:
        ...

    def count_expirable(self, as_of: date, product_id: Optional[int] = None) -> int:
        ...

    def mark_expired(self, as_of: date, product_id: Optional[int] = None) -> int:
        ...


class DjangoBatchRepository:
    """BatchRepository backed by the default Django database."""

    def active_batches(self, product_id):
        # FIFO: prod_date asc (nulls last), received_date asc, id asc
        return list(
            ProductBatch.objects.for_product(product_id).available().fifo_ordered()
        )

    def count_batch_numbers_with_prefix(self, product_id, prefix):
        return (
            ProductBatch.objects.for_product(product_id)
            .filter(batch_number__startswith=prefix)
            .count()
        )

    def batch_number_exists(self, product_id, batch_number):
        return (
            ProductBatch.objects.for_product(product_id)
            .filter(batch_number=batch_number)
            .exists()
        )

    def create_batch(self, **fields):
        batch = ProductBatch(**fields)
        batch.save()
        return batch

    def get_batches(self, batch_ids):
        ids = sorted(set(batch_ids))
        return {b.id: b for b in ProductBatch.objects.filter(id__in=ids)}

    def lock_batches(self, batch_ids):
        # Stable lock order (ascending id) so concurrent commits cannot deadlock.
        ids = sorted(set(batch_ids))
        qs = ProductBatch.objects.select_for_update().filter(id__in=ids).order_by("id")
        return {b.id: b for b in qs}

    def compare_and_set_quantity(self, *, batch_id, expected_quantity, new_quantity, new_status):
        updated = ProductBatch.objects.filter(
            id=batch_id,
            quantity=expected_quantity,
            status=ProductBatch.Status.ACTIVE,
        ).update(quantity=new_quantity, status=new_status, updated_at=timezone.now())
        return updated == 1

    def expiring_batches(self, start, end):
        return list(
            ProductBatch.objects.select_related("product")
            .available()
            .expiring_between(start, end)
            .order_by("exp_date", "id")
        )

    def _expirable(self, as_of, product_id=None):
        qs = ProductBatch.objects.filter(
            status=ProductBatch.Status.ACTIVE,
            exp_date__lte=as_of,
        )
        if product_id is not None:
            qs = qs.filter(product_id=product_id)
        return qs

    def count_expirable(self, as_of, product_id=None):
        return self._expirable(as_of, product_id).count()

    def mark_expired(self, as_of, product_id=None):
        return self._expirable(as_of, product_id).update(status=ProductBatch.Status.EXPIRED, updated_at=timezone.now())


def get_default_repository() -> BatchRepository:
    return DjangoBatchRepository()
