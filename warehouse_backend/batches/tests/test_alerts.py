# batches/tests/test_alerts.py

from datetime import date

from django.test import SimpleTestCase

from batches.domain import alerts
from batches.domain.alerts import AlertSeverity, AlertType, ExpiryDetails


class AlertTests(SimpleTestCase):
    """
    GUARANTEES:
    - Every alert kind has a fixed severity
    - Serialized alerts are JSON-ready (dates as ISO strings)
    """

    def test_every_type_has_a_severity(self):
        for alert_type in AlertType:
            self.assertIn(alert_type, alerts.SEVERITY_BY_TYPE)

    def test_blocking_kinds_are_errors(self):
        self.assertEqual(alerts.no_stock(1).severity, AlertSeverity.ERROR)
        self.assertEqual(
            alerts.insufficient_stock(product_id=1, required_quantity=5, total_available=3).severity,
            AlertSeverity.ERROR,
        )
        self.assertEqual(
            alerts.system_error(operation="expiry scan", error="timeout").severity,
            AlertSeverity.ERROR,
        )

    def test_insufficient_stock_message(self):
        alert = alerts.insufficient_stock(product_id=1, required_quantity=5, total_available=3)
        self.assertEqual(alert.message, "Insufficient stock. Required: 5, Available: 3")

    def test_to_dict(self):
        alert = alerts.near_expiry(
            ExpiryDetails(
                batch_id=7,
                batch_number="P1-20260101-001",
                quantity=4,
                exp_date=date(2026, 2, 1),
                days_until_expiry=12,
            )
        )

        self.assertEqual(
            alert.to_dict(),
            {
                "type": "NEAR_EXPIRY",
                "severity": "warning",
                "message": alert.message,
                "details": {
                    "batch_id": 7,
                    "batch_number": "P1-20260101-001",
                    "quantity": 4,
                    "exp_date": "2026-02-01",
                    "days_until_expiry": 12,
                },
            },
        )
