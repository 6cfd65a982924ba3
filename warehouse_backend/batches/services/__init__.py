"""
PATH: batches/services/__init__.py

Batch engine service surface.

Views, commands and other apps import from here, never from the ORM directly
for receiving, allocation, commit or expiry work.
"""

from .batch_numbers import generate_batch_number, is_generated_batch_number
from .commit import commit_allocation
from .conflicts import check_conflicts
from .exceptions import (
    AllocationConflictError,
    BatchNotFoundError,
    BatchServiceError,
    BatchStoreError,
)
from .expiry import expire_batches, scan_expiring
from .fifo import allocate, build_manual_plan
from .receiving import receive_batch
from .repository import BatchRepository, DjangoBatchRepository

__all__ = [
    "AllocationConflictError",
    "BatchNotFoundError",
    "BatchRepository",
    "BatchServiceError",
    "BatchStoreError",
    "DjangoBatchRepository",
    "allocate",
    "build_manual_plan",
    "check_conflicts",
    "commit_allocation",
    "expire_batches",
    "generate_batch_number",
    "is_generated_batch_number",
    "receive_batch",
    "scan_expiring",
]
