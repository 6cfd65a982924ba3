# batches/services/exceptions.py

"""
Batch engine domain errors.

Validation faults use django.core.exceptions.ValidationError (same as models).
Planning shortages are NOT errors: they come back as AllocationPlan(can_fulfill=False).
"""

from batches.domain import alerts as alert_factory


class BatchServiceError(Exception):
    """Base class for batch engine failures."""


class BatchStoreError(BatchServiceError):
    """
    The batch store could not be read or written (connection lost, timeout, ...).
    Always raised `from` the underlying DatabaseError.
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(message or f"Batch store unavailable during {operation}")

    @property
    def alert(self):
        return alert_factory.system_error(operation=self.operation, error=self)


class BatchNotFoundError(BatchServiceError):
    def __init__(self, batch_ids):
        self.batch_ids = sorted(batch_ids)
        super().__init__(f"Batch(es) not found: {self.batch_ids}")


class AllocationConflictError(BatchServiceError):
    """
    Commit-time race: at least one batch no longer holds the quantity the plan
    expected. Nothing was written. Callers should re-plan, not retry blindly.
    """

    def __init__(self, *, batch_id, product_id, required_quantity, available_quantity):
        self.batch_id = batch_id
        self.product_id = product_id
        self.required_quantity = required_quantity
        self.available_quantity = available_quantity
        self.alert = alert_factory.insufficient_stock(
            product_id=product_id,
            required_quantity=required_quantity,
            total_available=available_quantity,
            stage="commit",
            batch_id=batch_id,
        )
        super().__init__(self.alert.message)
