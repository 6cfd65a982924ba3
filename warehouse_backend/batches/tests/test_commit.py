# batches/tests/test_commit.py

from __future__ import annotations

from datetime import date
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase

from batches.domain.alerts import AlertType
from batches.models import ProductBatch
from batches.services import (
    AllocationConflictError,
    BatchNotFoundError,
    BatchStoreError,
    allocate,
    commit_allocation,
)
from batches.services.repository import DjangoBatchRepository
from products.models import Product


def _make_batch(product, number, qty, **extra):
    return ProductBatch.objects.create(
        product=product,
        batch_number=number,
        quantity=qty,
        original_quantity=qty,
        **extra,
    )


class CommitAllocationTests(TestCase):
    """
    Commit tests.

    GUARANTEES:
    - Quantities drop by exactly the committed amount
    - A batch reaching zero becomes Depleted
    - A stale plan fails as a whole; nothing is written
    - Stock is conserved: original = remaining + consumed
    """

    def setUp(self):
        self.product = Product.objects.create(sku="RICE-5KG", name="Rice 5kg")
        self.b1 = _make_batch(self.product, "JAN-01", 5, prod_date=date(2026, 1, 1))
        self.b2 = _make_batch(self.product, "JAN-05", 10, prod_date=date(2026, 1, 5))

    def _quantities(self):
        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        return (self.b1.quantity, self.b2.quantity)

    def test_commit_applies_plan(self):
        plan = allocate(self.product.id, 8)
        results = commit_allocation(plan.lines)

        self.assertEqual(self._quantities(), (0, 7))
        self.assertEqual(self.b1.status, ProductBatch.Status.DEPLETED)
        self.assertEqual(self.b2.status, ProductBatch.Status.ACTIVE)

        self.assertEqual(
            [(r.batch_id, r.previous_quantity, r.consumed, r.new_quantity) for r in results],
            [(self.b1.id, 5, 5, 0), (self.b2.id, 10, 3, 7)],
        )
        self.assertEqual(results[0].status, "Depleted")

    def test_stock_is_conserved(self):
        commit_allocation([{"batch_id": self.b2.id, "quantity": 4}])
        commit_allocation([{"batch_id": self.b2.id, "quantity": 1}])

        self.b2.refresh_from_db()
        self.assertEqual(self.b2.original_quantity, self.b2.quantity + 5)
        self.assertEqual(self.product.total_stock, 10)

    def test_depleted_batch_drops_out_of_planning(self):
        commit_allocation(allocate(self.product.id, 5).lines)

        plan = allocate(self.product.id, 3)
        self.assertEqual([line.batch_id for line in plan.lines], [self.b2.id])
        self.assertEqual(plan.total_available, 10)

    def test_stale_plan_fails_whole_commit(self):
        stale = allocate(self.product.id, 8)

        # another picker takes the whole first batch in the meantime
        commit_allocation([{"batch_id": self.b1.id, "quantity": 5}])

        with self.assertRaises(AllocationConflictError) as ctx:
            commit_allocation(stale.lines)

        self.assertEqual(ctx.exception.batch_id, self.b1.id)
        self.assertEqual(ctx.exception.available_quantity, 0)
        self.assertEqual(ctx.exception.alert.type, AlertType.INSUFFICIENT_STOCK)
        self.assertEqual(ctx.exception.alert.details.stage, "commit")

        # second line untouched
        self.assertEqual(self._quantities(), (0, 10))

    def test_partial_shortfall_fails_whole_commit(self):
        with self.assertRaises(AllocationConflictError):
            commit_allocation(
                [
                    {"batch_id": self.b1.id, "quantity": 2},
                    {"batch_id": self.b2.id, "quantity": 11},
                ]
            )

        self.assertEqual(self._quantities(), (5, 10))

    def test_lost_compare_and_set_rolls_back_earlier_lines(self):
        repo = DjangoBatchRepository()
        real_swap = repo.compare_and_set_quantity
        calls = []

        def swap_then_lose(**kwargs):
            calls.append(kwargs["batch_id"])
            if len(calls) == 1:
                return real_swap(**kwargs)
            return False

        with mock.patch.object(repo, "compare_and_set_quantity", side_effect=swap_then_lose):
            with self.assertRaises(AllocationConflictError) as ctx:
                commit_allocation(
                    [
                        {"batch_id": self.b1.id, "quantity": 2},
                        {"batch_id": self.b2.id, "quantity": 3},
                    ],
                    repository=repo,
                )

        self.assertEqual(ctx.exception.batch_id, self.b2.id)
        self.assertEqual(self._quantities(), (5, 10))

    def test_expired_batch_cannot_be_committed(self):
        self.b1.status = ProductBatch.Status.EXPIRED
        self.b1.save()

        with self.assertRaises(AllocationConflictError):
            commit_allocation([{"batch_id": self.b1.id, "quantity": 1}])

    def test_duplicate_lines_are_merged(self):
        results = commit_allocation(
            [
                {"batch_id": self.b2.id, "quantity": 2},
                {"batch_id": self.b2.id, "quantity": 3},
            ]
        )

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].consumed, 5)
        self.assertEqual(self._quantities(), (5, 5))

    def test_unknown_batch(self):
        with self.assertRaises(BatchNotFoundError):
            commit_allocation([{"batch_id": 999999, "quantity": 1}])

        self.assertEqual(self._quantities(), (5, 10))

    def test_empty_or_invalid_lines_rejected(self):
        with self.assertRaises(ValidationError):
            commit_allocation([])
        with self.assertRaises(ValidationError):
            commit_allocation([{"batch_id": self.b1.id, "quantity": 0}])
        with self.assertRaises(ValidationError):
            commit_allocation(["bogus"])

    def test_store_failure_is_explicit(self):
        repo = DjangoBatchRepository()
        with mock.patch.object(repo, "lock_batches", side_effect=DatabaseError("down")):
            with self.assertRaises(BatchStoreError) as ctx:
                commit_allocation([{"batch_id": self.b1.id, "quantity": 1}], repository=repo)

        self.assertEqual(ctx.exception.operation, "allocation commit")
        self.assertEqual(self._quantities(), (5, 10))
