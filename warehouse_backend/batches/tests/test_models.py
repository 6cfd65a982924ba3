# batches/tests/test_models.py

from __future__ import annotations

from datetime import date, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from batches.models import ProductBatch
from products.models import Product


def _make_batch(product, number, qty, **extra):
    return ProductBatch.objects.create(
        product=product,
        batch_number=number,
        quantity=qty,
        original_quantity=extra.pop("original_quantity", qty),
        **extra,
    )


class ProductBatchModelTests(TestCase):
    """
    ProductBatch integrity tests.

    GUARANTEES:
    - Receipt identity fields are immutable
    - Quantity never increases and never exceeds the received amount
    - Status agrees with remaining quantity
    - Batches holding stock cannot be deleted
    """

    def setUp(self):
        self.product = Product.objects.create(sku="RICE-5KG", name="Rice 5kg")
        self.batch = _make_batch(
            self.product,
            "LOT-001",
            20,
            prod_date=date(2026, 1, 1),
            exp_date=date(2026, 7, 1),
        )

    def test_new_batch_defaults_to_active(self):
        self.assertEqual(self.batch.status, ProductBatch.Status.ACTIVE)
        self.assertIsNotNone(self.batch.received_date)

    def test_batch_number_is_immutable(self):
        self.batch.batch_number = "LOT-999"
        with self.assertRaises(ValidationError):
            self.batch.save()

    def test_original_quantity_is_immutable(self):
        self.batch.original_quantity = 40
        with self.assertRaises(ValidationError):
            self.batch.save()

    def test_quantity_cannot_increase(self):
        self.batch.quantity = 15
        self.batch.save()

        self.batch.quantity = 18
        with self.assertRaises(ValidationError):
            self.batch.save()

    def test_quantity_cannot_exceed_original(self):
        with self.assertRaises(ValidationError):
            _make_batch(self.product, "LOT-002", 30, original_quantity=10)

    def test_zero_original_quantity_rejected(self):
        with self.assertRaises(ValidationError):
            _make_batch(self.product, "LOT-003", 0)

    def test_exp_date_must_follow_prod_date(self):
        with self.assertRaises(ValidationError):
            _make_batch(
                self.product,
                "LOT-004",
                5,
                prod_date=date(2026, 3, 1),
                exp_date=date(2026, 3, 1),
            )

    def test_depleted_batch_cannot_hold_stock(self):
        with self.assertRaises(ValidationError):
            _make_batch(self.product, "LOT-005", 5, status=ProductBatch.Status.DEPLETED)

    def test_active_batch_must_hold_stock(self):
        self.batch.quantity = 0
        with self.assertRaises(ValidationError):
            self.batch.save()

        self.batch.quantity = 0
        self.batch.status = ProductBatch.Status.DEPLETED
        self.batch.save()
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.status, ProductBatch.Status.DEPLETED)

    def test_batch_number_unique_per_product(self):
        with self.assertRaises(ValidationError):
            _make_batch(self.product, "LOT-001", 5)

        other = Product.objects.create(sku="OATS-1KG", name="Oats 1kg")
        _make_batch(other, "LOT-001", 5)
        self.assertEqual(ProductBatch.objects.filter(batch_number="LOT-001").count(), 2)

    def test_cannot_delete_batch_with_stock(self):
        with self.assertRaises(ValidationError):
            self.batch.delete()

        self.assertTrue(ProductBatch.objects.filter(id=self.batch.id).exists())

    def test_days_until_expiry(self):
        self.assertEqual(self.batch.days_until_expiry(today=date(2026, 6, 21)), 10)
        self.assertEqual(self.batch.days_until_expiry(today=date(2026, 7, 1)), 0)

        undated = _make_batch(self.product, "LOT-006", 5)
        self.assertIsNone(undated.days_until_expiry())
        self.assertFalse(undated.is_expired_by_date)

    def test_product_total_stock_counts_active_batches_only(self):
        _make_batch(self.product, "LOT-007", 7, status=ProductBatch.Status.EXPIRED)
        _make_batch(self.product, "LOT-008", 3)

        self.assertEqual(self.product.total_stock, 23)


class BatchQuerySetTests(TestCase):
    """
    GUARANTEES:
    - fifo_ordered(): prod_date asc, undated last, then received_date, then id
    - available(): Active with stock only
    """

    def setUp(self):
        self.product = Product.objects.create(sku="JUICE-1L", name="Juice 1L")
        now = timezone.now()

        self.undated = _make_batch(self.product, "U", 4, received_date=now - timedelta(days=30))
        self.late = _make_batch(self.product, "L", 4, prod_date=date(2026, 2, 1), received_date=now)
        self.early_second = _make_batch(
            self.product, "E2", 4, prod_date=date(2026, 1, 1), received_date=now
        )
        self.early_first = _make_batch(
            self.product,
            "E1",
            4,
            prod_date=date(2026, 1, 1),
            received_date=now - timedelta(days=1),
        )
        self.expired = _make_batch(
            self.product, "X", 4, prod_date=date(2025, 1, 1), status=ProductBatch.Status.EXPIRED
        )

    def test_fifo_order(self):
        ordered = list(
            ProductBatch.objects.for_product(self.product.id).available().fifo_ordered()
        )
        self.assertEqual(
            [b.batch_number for b in ordered],
            ["E1", "E2", "L", "U"],
        )

    def test_available_excludes_non_active(self):
        ids = set(ProductBatch.objects.available().values_list("id", flat=True))
        self.assertNotIn(self.expired.id, ids)
