# batches/tests/test_validation.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from batches.services.validation import to_cost, to_positive_int


class PositiveIntTests(SimpleTestCase):
    """
    GUARANTEES:
    - Only ASCII whole numbers > 0 are accepted
    - Every rejection is a ValidationError, never a bare ValueError
    """

    def test_accepts_ints_and_digit_strings(self):
        self.assertEqual(to_positive_int(7), 7)
        self.assertEqual(to_positive_int(" 12 "), 12)

    def test_unicode_digits_rejected(self):
        for raw in ("²", "³4", "٣", "１２"):
            with self.assertRaises(ValidationError):
                to_positive_int(raw)

    def test_non_positive_and_odd_types_rejected(self):
        for raw in (0, -3, "0", "-1", "2.5", 2.5, True, None, ""):
            with self.assertRaises(ValidationError):
                to_positive_int(raw)


class CostTests(SimpleTestCase):
    """
    GUARANTEES:
    - Costs are quantized to cents
    - Values that cannot fit cost_price (12 digits, 2 decimals) are ValidationErrors
    """

    def test_quantizes_to_cents(self):
        self.assertEqual(to_cost("4.5"), Decimal("4.50"))
        self.assertEqual(to_cost(3), Decimal("3.00"))
        self.assertIsNone(to_cost(""))

    def test_precision_overflow_rejected(self):
        with self.assertRaises(ValidationError):
            to_cost("1E+30")

    def test_more_than_max_digits_rejected(self):
        self.assertEqual(to_cost("9999999999.99"), Decimal("9999999999.99"))
        with self.assertRaises(ValidationError):
            to_cost("10000000000")

    def test_negative_and_garbage_rejected(self):
        for raw in ("-0.01", "abc", "NaN", "Infinity"):
            with self.assertRaises(ValidationError):
                to_cost(raw)
