# batches/tests/test_conflicts.py

from __future__ import annotations

from datetime import date, datetime, timezone as dt_timezone
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from batches.domain.alerts import AlertSeverity, AlertType
from batches.models import ProductBatch
from batches.services import BatchStoreError, check_conflicts
from batches.services.repository import DjangoBatchRepository
from products.models import Product


class ConflictDetectorTests(TestCase):
    """
    GUARANTEES:
    - Differing (prod_date, exp_date) against Active stock raises ONE DATE_CONFLICT advisory
    - Identical dates never alert
    - Depleted / Expired batches are ignored
    - Dates are compared as calendar days
    """

    def setUp(self):
        self.product = Product.objects.create(sku="YOG-500", name="Yoghurt 500g")
        self.existing = ProductBatch.objects.create(
            product=self.product,
            batch_number="LOT-FEB",
            quantity=10,
            original_quantity=10,
            prod_date=date(2026, 2, 1),
            exp_date=date(2026, 3, 1),
        )

    def test_no_existing_stock_no_alert(self):
        other = Product.objects.create(sku="SOAP-BAR", name="Soap bar")
        result = check_conflicts(other.id, date(2026, 3, 1), None)

        self.assertFalse(result.has_alert)
        self.assertIsNone(result.alert)
        self.assertEqual(result.existing_batches, ())

    def test_different_production_date_alerts(self):
        result = check_conflicts(self.product.id, date(2026, 3, 1), date(2026, 4, 1))

        self.assertTrue(result.has_alert)
        self.assertEqual(result.alert.type, AlertType.DATE_CONFLICT)
        self.assertEqual(result.alert.severity, AlertSeverity.WARNING)
        self.assertEqual(result.alert.details.new_prod_date, date(2026, 3, 1))
        self.assertEqual(
            [b.batch_id for b in result.alert.details.existing_batches],
            [self.existing.id],
        )

    def test_same_dates_do_not_alert(self):
        result = check_conflicts(self.product.id, date(2026, 2, 1), date(2026, 3, 1))

        self.assertFalse(result.has_alert)
        self.assertEqual(len(result.existing_batches), 1)

    def test_timestamps_on_the_same_day_do_not_alert(self):
        result = check_conflicts(
            self.product.id,
            "2026-02-01",
            datetime(2026, 3, 1, 9, 30, tzinfo=dt_timezone.utc),
        )
        self.assertFalse(result.has_alert)

    def test_one_alert_lists_every_existing_batch(self):
        ProductBatch.objects.create(
            product=self.product,
            batch_number="LOT-FEB-2",
            quantity=4,
            original_quantity=4,
            prod_date=date(2026, 2, 1),
            exp_date=date(2026, 3, 1),
        )

        result = check_conflicts(self.product.id, None, None)

        self.assertTrue(result.has_alert)
        self.assertEqual(len(result.alert.details.existing_batches), 2)

    def test_inactive_batches_are_ignored(self):
        self.existing.quantity = 0
        self.existing.status = ProductBatch.Status.DEPLETED
        self.existing.save()

        result = check_conflicts(self.product.id, date(2026, 3, 1), None)
        self.assertFalse(result.has_alert)

    def test_store_failure_is_explicit(self):
        repo = DjangoBatchRepository()

        with mock.patch.object(repo, "active_batches", side_effect=DatabaseError("timeout")):
            with self.assertRaises(BatchStoreError) as ctx:
                check_conflicts(self.product.id, date(2026, 3, 1), repository=repo)

        self.assertEqual(ctx.exception.alert.type, AlertType.SYSTEM_ERROR)
