# batches/tests/test_batch_numbers.py

from __future__ import annotations

from datetime import date
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from batches.models import ProductBatch
from batches.services import generate_batch_number, is_generated_batch_number
from batches.services.batch_numbers import is_fallback_batch_number
from batches.services.repository import DjangoBatchRepository
from products.models import Product


class BatchNumberGeneratorTests(TestCase):
    """
    GUARANTEES:
    - Format is P{productId}-{YYYYMMDD}-{seq:03d}
    - Sequence counts existing numbers for the same product and day
    - Store failure yields the timestamp fallback instead of an error
    """

    def setUp(self):
        self.product = Product.objects.create(sku="OATS-1KG", name="Oats 1kg")
        self.prod_date = date(2026, 3, 15)

    def _receive(self, number):
        return ProductBatch.objects.create(
            product=self.product,
            batch_number=number,
            quantity=5,
            original_quantity=5,
            prod_date=self.prod_date,
        )

    def test_first_number_of_the_day(self):
        number = generate_batch_number(self.product.id, self.prod_date)
        self.assertEqual(number, f"P{self.product.id}-20260315-001")
        self.assertTrue(is_generated_batch_number(number))

    def test_sequence_increments_per_day(self):
        self._receive(f"P{self.product.id}-20260315-001")
        self._receive(f"P{self.product.id}-20260315-002")

        self.assertEqual(
            generate_batch_number(self.product.id, self.prod_date),
            f"P{self.product.id}-20260315-003",
        )
        self.assertEqual(
            generate_batch_number(self.product.id, date(2026, 3, 16)),
            f"P{self.product.id}-20260316-001",
        )

    def test_other_products_do_not_share_sequence(self):
        self._receive(f"P{self.product.id}-20260315-001")
        other = Product.objects.create(sku="RICE-5KG", name="Rice 5kg")

        self.assertEqual(
            generate_batch_number(other.id, self.prod_date),
            f"P{other.id}-20260315-001",
        )

    def test_missing_prod_date_uses_today(self):
        today = timezone.localdate()
        number = generate_batch_number(self.product.id)
        self.assertEqual(number, f"P{self.product.id}-{today:%Y%m%d}-001")

    def test_attempt_skips_ahead(self):
        self.assertEqual(
            generate_batch_number(self.product.id, self.prod_date, attempt=2),
            f"P{self.product.id}-20260315-003",
        )

    def test_store_failure_returns_timestamp_fallback(self):
        repo = DjangoBatchRepository()

        with mock.patch.object(
            repo, "count_batch_numbers_with_prefix", side_effect=DatabaseError("connection lost")
        ):
            number = generate_batch_number(self.product.id, self.prod_date, repository=repo)

        self.assertTrue(number.startswith(f"P{self.product.id}-"))
        self.assertTrue(is_fallback_batch_number(number))
        self.assertFalse(is_generated_batch_number(number))

    def test_supplier_labels_are_not_generated_numbers(self):
        self.assertFalse(is_generated_batch_number("LOT-2026-A"))
        self.assertFalse(is_generated_batch_number(None))
