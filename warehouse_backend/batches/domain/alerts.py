# batches/domain/alerts.py

"""
OPERATIONAL ALERTS

Closed set of alert kinds produced by the batch engine.
Each kind carries its own typed payload; callers branch on Alert.type.

Severity is fixed per kind:
- ERROR   : the operation could not do what was asked (NO_STOCK, INSUFFICIENT_STOCK, SYSTEM_ERROR)
- WARNING : advisory, attached to a successful result (everything else)
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


class AlertType(str, Enum):
    NO_STOCK = "NO_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    MULTIPLE_BATCHES = "MULTIPLE_BATCHES"
    NEAR_EXPIRY = "NEAR_EXPIRY"
    EXPIRED_STOCK = "EXPIRED_STOCK"
    DATE_CONFLICT = "DATE_CONFLICT"
    SYSTEM_ERROR = "SYSTEM_ERROR"


class AlertSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


SEVERITY_BY_TYPE = {
    AlertType.NO_STOCK: AlertSeverity.ERROR,
    AlertType.INSUFFICIENT_STOCK: AlertSeverity.ERROR,
    AlertType.MULTIPLE_BATCHES: AlertSeverity.WARNING,
    AlertType.NEAR_EXPIRY: AlertSeverity.WARNING,
    AlertType.EXPIRED_STOCK: AlertSeverity.WARNING,
    AlertType.DATE_CONFLICT: AlertSeverity.WARNING,
    AlertType.SYSTEM_ERROR: AlertSeverity.ERROR,
}


# ============================================================
# PAYLOADS
# ============================================================

@dataclass(frozen=True)
class NoStockDetails:
    product_id: int


@dataclass(frozen=True)
class InsufficientStockDetails:
    """
    stage="plan"   : planning-time shortage (re-stock or reduce the order)
    stage="commit" : the plan went stale before commit (re-plan)
    """

    product_id: Optional[int]
    required_quantity: int
    total_available: int
    stage: str = "plan"
    batch_id: Optional[int] = None


@dataclass(frozen=True)
class BatchPriority:
    priority: int
    batch_id: int
    batch_number: str
    quantity: int
    prod_date: Optional[date]
    exp_date: Optional[date]


@dataclass(frozen=True)
class MultipleBatchesDetails:
    batches: tuple[BatchPriority, ...]


@dataclass(frozen=True)
class ExpiryDetails:
    batch_id: int
    batch_number: str
    quantity: int
    exp_date: date
    days_until_expiry: int


@dataclass(frozen=True)
class ExistingBatchDates:
    batch_id: int
    batch_number: str
    quantity: int
    prod_date: Optional[date]
    exp_date: Optional[date]
    received_date: datetime


@dataclass(frozen=True)
class DateConflictDetails:
    product_id: int
    new_prod_date: Optional[date]
    new_exp_date: Optional[date]
    existing_batches: tuple[ExistingBatchDates, ...]


@dataclass(frozen=True)
class SystemErrorDetails:
    operation: str
    error: str


AlertDetails = Union[
    NoStockDetails,
    InsufficientStockDetails,
    MultipleBatchesDetails,
    ExpiryDetails,
    DateConflictDetails,
    SystemErrorDetails,
]


def _jsonable(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


@dataclass(frozen=True)
class Alert:
    type: AlertType
    message: str
    details: AlertDetails

    @property
    def severity(self) -> AlertSeverity:
        return SEVERITY_BY_TYPE[self.type]

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": _jsonable(dataclasses.asdict(self.details)),
        }


# ============================================================
# FACTORIES
# ============================================================

def no_stock(product_id: int) -> Alert:
    return Alert(
        type=AlertType.NO_STOCK,
        message="No stock available for this product.",
        details=NoStockDetails(product_id=product_id),
    )


def insufficient_stock(
    *,
    product_id,
    required_quantity: int,
    total_available: int,
    stage: str = "plan",
    batch_id=None,
) -> Alert:
    if stage == "commit":
        message = (
            f"Stock changed since planning (batch {batch_id}). "
            f"Required: {required_quantity}, Available: {total_available}. Re-plan the allocation."
        )
    else:
        message = (
            f"Insufficient stock. Required: {required_quantity}, Available: {total_available}"
        )

    return Alert(
        type=AlertType.INSUFFICIENT_STOCK,
        message=message,
        details=InsufficientStockDetails(
            product_id=product_id,
            required_quantity=required_quantity,
            total_available=total_available,
            stage=stage,
            batch_id=batch_id,
        ),
    )


def multiple_batches(batches) -> Alert:
    return Alert(
        type=AlertType.MULTIPLE_BATCHES,
        message=(
            "This product has multiple batches with different dates. "
            "Prepare using FIFO (oldest production date first)."
        ),
        details=MultipleBatchesDetails(batches=tuple(batches)),
    )


def near_expiry(details: ExpiryDetails) -> Alert:
    return Alert(
        type=AlertType.NEAR_EXPIRY,
        message=(
            f"Batch {details.batch_number} expires in {details.days_until_expiry} day(s). "
            "Prioritize it in preparation."
        ),
        details=details,
    )


def expired_stock(details: ExpiryDetails) -> Alert:
    return Alert(
        type=AlertType.EXPIRED_STOCK,
        message=(
            f"Batch {details.batch_number} is expired by date ({details.exp_date.isoformat()}) "
            "but still marked Active. Check before shipping."
        ),
        details=details,
    )


def date_conflict(*, product_id: int, new_prod_date, new_exp_date, existing_batches) -> Alert:
    return Alert(
        type=AlertType.DATE_CONFLICT,
        message=(
            "This product already has stock with different production/expiry dates. "
            "Please verify batch management."
        ),
        details=DateConflictDetails(
            product_id=product_id,
            new_prod_date=new_prod_date,
            new_exp_date=new_exp_date,
            existing_batches=tuple(existing_batches),
        ),
    )


def system_error(*, operation: str, error) -> Alert:
    return Alert(
        type=AlertType.SYSTEM_ERROR,
        message=f"System error occurred during {operation}.",
        details=SystemErrorDetails(operation=operation, error=str(error)),
    )
