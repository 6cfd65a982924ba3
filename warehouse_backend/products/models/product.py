# products/models/product.py

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Sum

from .category import Category


class Product(models.Model):
    """
    Represents a stocked warehouse product.

    STOCK MODEL (IMPORTANT):
    - Product itself does NOT store stock
    - Stock lives in batches.ProductBatch (one row per receipt)
    - Total stock = sum of quantity across ACTIVE batches

    Batch numbers embed the integer product id (P{id}-YYYYMMDD-NNN),
    so products keep the default auto-increment primary key.
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)

    low_stock_threshold = models.PositiveIntegerField(default=10)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["name"], name="idx_product_name"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if not (self.sku or "").strip():
            raise ValidationError({"sku": "sku is required"})

        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})

    @property
    def total_stock(self) -> int:
        """
        Total AVAILABLE stock.

        RULES:
        - Only Active batches (Expired / Depleted are excluded)
        - Sum of remaining quantity
        """
        from batches.models import ProductBatch

        return (
            self.batches.filter(status=ProductBatch.Status.ACTIVE, quantity__gt=0)
            .aggregate(total=Sum("quantity"))
            .get("total")
            or 0
        )

    @property
    def is_low_stock(self) -> bool:
        return self.total_stock <= int(self.low_stock_threshold or 0)
