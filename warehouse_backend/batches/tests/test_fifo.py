# batches/tests/test_fifo.py

from __future__ import annotations

from datetime import date, timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from batches.domain.alerts import AlertSeverity, AlertType
from batches.models import ProductBatch
from batches.services import (
    BatchNotFoundError,
    BatchStoreError,
    allocate,
    build_manual_plan,
)
from batches.services.repository import DjangoBatchRepository
from products.models import Product

TODAY = date(2026, 1, 10)


def _make_batch(product, number, qty, **extra):
    return ProductBatch.objects.create(
        product=product,
        batch_number=number,
        quantity=qty,
        original_quantity=qty,
        **extra,
    )


class FifoAllocationTests(TestCase):
    """
    FIFO planning tests.

    GUARANTEES:
    - Oldest production date is consumed first
    - Shortages come back as results, never exceptions
    - Plans are read-only and deterministic
    """

    def setUp(self):
        self.product = Product.objects.create(sku="RICE-5KG", name="Rice 5kg")
        self.b1 = _make_batch(self.product, "JAN-01", 5, prod_date=date(2026, 1, 1))
        self.b2 = _make_batch(self.product, "JAN-05", 10, prod_date=date(2026, 1, 5))

    def test_oldest_batch_first_across_two_batches(self):
        plan = allocate(self.product.id, 8, today=TODAY)

        self.assertTrue(plan.can_fulfill)
        self.assertEqual(
            [(line.batch_id, line.quantity) for line in plan.lines],
            [(self.b1.id, 5), (self.b2.id, 3)],
        )
        self.assertEqual(plan.total_available, 15)
        self.assertEqual(plan.allocated_quantity, 8)
        self.assertTrue(plan.has_alert(AlertType.MULTIPLE_BATCHES))
        self.assertEqual(plan.recommendation, "Use oldest stock first (FIFO method)")

    def test_multiple_batches_alert_lists_priority(self):
        plan = allocate(self.product.id, 8, today=TODAY)
        alert = plan.alerts_of(AlertType.MULTIPLE_BATCHES)[0]

        self.assertEqual(alert.severity, AlertSeverity.WARNING)
        self.assertEqual(
            [(p.priority, p.batch_id) for p in alert.details.batches],
            [(1, self.b1.id), (2, self.b2.id)],
        )

    def test_single_line_has_no_multiple_batches_alert(self):
        plan = allocate(self.product.id, 5, today=TODAY)

        self.assertEqual([(l.batch_id, l.quantity) for l in plan.lines], [(self.b1.id, 5)])
        self.assertFalse(plan.has_alert(AlertType.MULTIPLE_BATCHES))
        self.assertEqual(plan.lines[0].remaining_in_batch, 0)

    def test_same_cohort_lines_do_not_alert(self):
        product = Product.objects.create(sku="OATS-1KG", name="Oats 1kg")
        _make_batch(product, "A", 2, prod_date=date(2026, 1, 1), exp_date=date(2026, 9, 1))
        _make_batch(product, "B", 2, prod_date=date(2026, 1, 1), exp_date=date(2026, 9, 1))

        plan = allocate(product.id, 3, today=TODAY)

        self.assertEqual(len(plan.lines), 2)
        self.assertFalse(plan.has_alert(AlertType.MULTIPLE_BATCHES))

    def test_insufficient_stock(self):
        product = Product.objects.create(sku="JUICE-1L", name="Juice 1L")
        _make_batch(product, "ONLY", 3)

        plan = allocate(product.id, 5, today=TODAY)

        self.assertFalse(plan.can_fulfill)
        self.assertEqual(plan.total_available, 3)
        self.assertEqual(plan.lines, ())
        self.assertEqual([a.type for a in plan.alerts], [AlertType.INSUFFICIENT_STOCK])
        self.assertEqual(plan.alerts[0].severity, AlertSeverity.ERROR)
        self.assertEqual(plan.alerts[0].details.stage, "plan")

    def test_no_stock(self):
        product = Product.objects.create(sku="SOAP-BAR", name="Soap bar")

        plan = allocate(product.id, 1, today=TODAY)

        self.assertFalse(plan.can_fulfill)
        self.assertEqual(plan.total_available, 0)
        self.assertEqual([a.type for a in plan.alerts], [AlertType.NO_STOCK])

    def test_exact_total_is_fulfillable(self):
        plan = allocate(self.product.id, 15, today=TODAY)

        self.assertTrue(plan.can_fulfill)
        self.assertEqual(plan.allocated_quantity, 15)

    def test_invalid_quantity_rejected(self):
        for bad in (0, -1, 1.5, "abc", None, True):
            with self.assertRaises(ValidationError):
                allocate(self.product.id, bad)

    def test_planning_does_not_mutate_stock(self):
        allocate(self.product.id, 8, today=TODAY)

        self.b1.refresh_from_db()
        self.b2.refresh_from_db()
        self.assertEqual((self.b1.quantity, self.b2.quantity), (5, 10))

    def test_plans_are_deterministic(self):
        first = allocate(self.product.id, 12, today=TODAY)
        second = allocate(self.product.id, 12, today=TODAY)
        self.assertEqual(first, second)

    def test_tie_breaks_on_received_date_then_id(self):
        product = Product.objects.create(sku="FLOUR-2KG", name="Flour 2kg")
        now = timezone.now()
        later = _make_batch(product, "LATER", 2, prod_date=date(2026, 1, 1), received_date=now)
        earlier = _make_batch(
            product, "EARLIER", 2, prod_date=date(2026, 1, 1), received_date=now - timedelta(hours=2)
        )
        undated = _make_batch(product, "UNDATED", 2, received_date=now - timedelta(days=9))

        plan = allocate(product.id, 6, today=TODAY)

        self.assertEqual(
            [line.batch_id for line in plan.lines],
            [earlier.id, later.id, undated.id],
        )

    def test_non_active_batches_are_never_planned(self):
        product = Product.objects.create(sku="SUGAR-1KG", name="Sugar 1kg")
        _make_batch(product, "OLD", 9, prod_date=date(2025, 1, 1), status=ProductBatch.Status.EXPIRED)
        fresh = _make_batch(product, "NEW", 4, prod_date=date(2026, 1, 1))

        plan = allocate(product.id, 4, today=TODAY)

        self.assertEqual(plan.total_available, 4)
        self.assertEqual([line.batch_id for line in plan.lines], [fresh.id])

    def test_store_failure_is_explicit(self):
        repo = DjangoBatchRepository()
        with mock.patch.object(repo, "active_batches", side_effect=DatabaseError("down")):
            with self.assertRaises(BatchStoreError):
                allocate(self.product.id, 1, repository=repo)


class FifoExpiryAlertTests(TestCase):
    """
    GUARANTEES:
    - NEAR_EXPIRY for lines expiring within NEAR_EXPIRY_DAYS
    - EXPIRED_STOCK for Active lines already past their date
    - Both are advisory: the plan still fulfills
    """

    def setUp(self):
        self.product = Product.objects.create(sku="YOG-500", name="Yoghurt 500g")

    def test_near_expiry_line(self):
        batch = _make_batch(self.product, "SOON", 5, exp_date=TODAY + timedelta(days=5))

        plan = allocate(self.product.id, 2, today=TODAY)

        self.assertTrue(plan.can_fulfill)
        alert = plan.alerts_of(AlertType.NEAR_EXPIRY)[0]
        self.assertEqual(alert.details.batch_id, batch.id)
        self.assertEqual(alert.details.days_until_expiry, 5)

    def test_expired_by_date_line(self):
        _make_batch(self.product, "PAST", 5, exp_date=TODAY - timedelta(days=1))

        plan = allocate(self.product.id, 2, today=TODAY)

        self.assertTrue(plan.can_fulfill)
        self.assertTrue(plan.has_alert(AlertType.EXPIRED_STOCK))
        self.assertFalse(plan.has_alert(AlertType.NEAR_EXPIRY))

    def test_expires_today_counts_as_expired(self):
        _make_batch(self.product, "TODAY", 5, exp_date=TODAY)

        plan = allocate(self.product.id, 1, today=TODAY)
        self.assertTrue(plan.has_alert(AlertType.EXPIRED_STOCK))

    @override_settings(INVENTORY={"NEAR_EXPIRY_DAYS": 3})
    def test_far_expiry_has_no_alert(self):
        _make_batch(self.product, "LATER", 5, exp_date=TODAY + timedelta(days=5))

        plan = allocate(self.product.id, 1, today=TODAY)
        self.assertEqual(plan.alerts, ())

    def test_plan_serializes_alerts(self):
        _make_batch(self.product, "SOON", 5, exp_date=TODAY + timedelta(days=5))

        payload = allocate(self.product.id, 1, today=TODAY).to_dict()

        self.assertEqual(payload["alerts"][0]["type"], "NEAR_EXPIRY")
        self.assertEqual(payload["alerts"][0]["severity"], "warning")
        self.assertEqual(payload["lines"][0]["exp_date"], "2026-01-15")


class ManualPlanTests(TestCase):
    """
    GUARANTEES:
    - Worker-picked batches are validated against the store
    - Selections must add up to the required quantity
    - Result says whether the pick matches FIFO
    """

    def setUp(self):
        self.product = Product.objects.create(sku="RICE-5KG", name="Rice 5kg")
        self.b1 = _make_batch(self.product, "JAN-01", 5, prod_date=date(2026, 1, 1))
        self.b2 = _make_batch(self.product, "JAN-05", 10, prod_date=date(2026, 1, 5))

    def test_manual_plan_keeps_worker_order(self):
        plan = build_manual_plan(
            self.product.id,
            6,
            [{"batch_id": self.b2.id, "quantity": 6}],
            today=TODAY,
        )

        self.assertTrue(plan.can_fulfill)
        self.assertEqual([(l.batch_id, l.quantity) for l in plan.lines], [(self.b2.id, 6)])
        self.assertIn("differs from FIFO", plan.recommendation)

    def test_manual_plan_matching_fifo(self):
        plan = build_manual_plan(
            self.product.id,
            8,
            [(self.b1.id, 5), (self.b2.id, 3)],
            today=TODAY,
        )
        self.assertEqual(plan.recommendation, "Manual selection matches FIFO order")

    def test_sum_must_match_required(self):
        with self.assertRaises(ValidationError):
            build_manual_plan(self.product.id, 8, [(self.b1.id, 5)])

    def test_duplicate_selection_rejected(self):
        with self.assertRaises(ValidationError):
            build_manual_plan(self.product.id, 4, [(self.b1.id, 2), (self.b1.id, 2)])

    def test_over_selection_rejected(self):
        with self.assertRaises(ValidationError):
            build_manual_plan(self.product.id, 7, [(self.b1.id, 7)])

    def test_other_product_batch_rejected(self):
        other = Product.objects.create(sku="OATS-1KG", name="Oats 1kg")
        foreign = _make_batch(other, "X", 5)

        with self.assertRaises(ValidationError):
            build_manual_plan(self.product.id, 2, [(foreign.id, 2)])

    def test_unknown_batch(self):
        with self.assertRaises(BatchNotFoundError) as ctx:
            build_manual_plan(self.product.id, 2, [(999999, 2)])
        self.assertEqual(ctx.exception.batch_ids, [999999])
