# batches/serializers/__init__.py

from .allocation import (
    AllocationLineInputSerializer,
    AllocationRequestSerializer,
    CommitSerializer,
    ExpiringQuerySerializer,
    ManualPlanSerializer,
)
from .batch import ConflictCheckSerializer, ProductBatchSerializer, ReceiveBatchSerializer

__all__ = [
    "AllocationLineInputSerializer",
    "AllocationRequestSerializer",
    "CommitSerializer",
    "ConflictCheckSerializer",
    "ExpiringQuerySerializer",
    "ManualPlanSerializer",
    "ProductBatchSerializer",
    "ReceiveBatchSerializer",
]
