# batches/models/__init__.py

from .batch import BatchQuerySet as BatchQuerySet
from .batch import ProductBatch as ProductBatch

__all__ = ["BatchQuerySet", "ProductBatch"]
