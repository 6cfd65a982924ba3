# batches/domain/results.py

"""
Result types returned by batch engine services.

All are immutable snapshots. Plans are stateless data: discarding a plan is the
only "cancel" there is, and committing a stale plan is detected at commit time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .alerts import Alert, AlertType, ExistingBatchDates, _jsonable


@dataclass(frozen=True)
class AllocationLine:
    batch_id: int
    product_id: int
    quantity: int
    batch_number: str
    prod_date: Optional[date]
    exp_date: Optional[date]
    received_date: datetime
    cost_price: Optional[Decimal] = None
    supplier_id: Optional[int] = None
    remaining_in_batch: int = 0

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "batch_number": self.batch_number,
            "prod_date": _jsonable(self.prod_date),
            "exp_date": _jsonable(self.exp_date),
            "received_date": _jsonable(self.received_date),
            "cost_price": _jsonable(self.cost_price),
            "supplier_id": self.supplier_id,
            "remaining_in_batch": self.remaining_in_batch,
        }


@dataclass(frozen=True)
class AllocationPlan:
    product_id: int
    can_fulfill: bool
    total_available: int
    required_quantity: int
    lines: tuple[AllocationLine, ...] = ()
    alerts: tuple[Alert, ...] = ()
    recommendation: str = ""

    @property
    def allocated_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    def alerts_of(self, alert_type: AlertType) -> list[Alert]:
        return [a for a in self.alerts if a.type == alert_type]

    def has_alert(self, alert_type: AlertType) -> bool:
        return any(a.type == alert_type for a in self.alerts)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "can_fulfill": self.can_fulfill,
            "total_available": self.total_available,
            "required_quantity": self.required_quantity,
            "lines": [line.to_dict() for line in self.lines],
            "alerts": [a.to_dict() for a in self.alerts],
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class ConflictCheck:
    has_alert: bool
    alert: Optional[Alert] = None
    existing_batches: tuple[ExistingBatchDates, ...] = ()

    def to_dict(self) -> dict:
        return {
            "has_alert": self.has_alert,
            "alert": self.alert.to_dict() if self.alert else None,
            "existing_batches": _jsonable(
                [
                    {
                        "batch_id": b.batch_id,
                        "batch_number": b.batch_number,
                        "quantity": b.quantity,
                        "prod_date": b.prod_date,
                        "exp_date": b.exp_date,
                        "received_date": b.received_date,
                    }
                    for b in self.existing_batches
                ]
            ),
        }


@dataclass(frozen=True)
class BatchUpdateResult:
    batch_id: int
    batch_number: str
    previous_quantity: int
    consumed: int
    new_quantity: int
    status: str

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "batch_number": self.batch_number,
            "previous_quantity": self.previous_quantity,
            "consumed": self.consumed,
            "new_quantity": self.new_quantity,
            "status": self.status,
        }


class ExpiryUrgency(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class ExpiryAlertEntry:
    batch_id: int
    batch_number: str
    product_id: int
    product_name: str
    product_sku: str
    quantity: int
    exp_date: date
    days_until_expiry: int
    urgency: ExpiryUrgency

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "batch_number": self.batch_number,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "quantity": self.quantity,
            "exp_date": self.exp_date.isoformat(),
            "days_until_expiry": self.days_until_expiry,
            "urgency": self.urgency.value,
        }


@dataclass(frozen=True)
class ExpiryScanResult:
    """
    Successful scan. An empty entries tuple means "no matches";
    a failed query raises BatchStoreError instead.
    """

    as_of: date
    days_ahead: int
    entries: tuple[ExpiryAlertEntry, ...] = ()

    def by_urgency(self, urgency: ExpiryUrgency) -> list[ExpiryAlertEntry]:
        return [e for e in self.entries if e.urgency == urgency]

    def to_dict(self) -> dict:
        return {
            "as_of": self.as_of.isoformat(),
            "days_ahead": self.days_ahead,
            "count": len(self.entries),
            "summary": {u.value: len(self.by_urgency(u)) for u in ExpiryUrgency},
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class ReceiptResult:
    batch: Any
    conflict: ConflictCheck
    number_generated: bool = False
