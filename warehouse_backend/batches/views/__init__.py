# batches/views/__init__.py

from .allocation import AllocationViewSet
from .batch import ProductBatchViewSet

__all__ = [
    "AllocationViewSet",
    "ProductBatchViewSet",
]
