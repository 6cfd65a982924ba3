# batches/models/batch.py

"""
PRODUCT BATCH (RECEIPT-BASED INVENTORY)

Represents ONE dated receipt of stock for one product.

RULES:
- Created only through receiving (batches.services.receiving)
- product, batch_number, original_quantity, received_date are immutable
- quantity only goes DOWN through a normal save (allocation commit / sweep)
- DEPLETED holds iff quantity == 0
- EXPIRED is an administrative marker; it never changes quantity
- Never deleted while quantity > 0
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from products.models import Product


class BatchQuerySet(models.QuerySet):
    def for_product(self, product_id):
        return self.filter(product_id=product_id)

    def available(self):
        """
        Allocatable stock: ACTIVE with remaining quantity.
        Expiry DATE is deliberately not filtered here (status may lag the date).
        """
        return self.filter(status=ProductBatch.Status.ACTIVE, quantity__gt=0)

    def fifo_ordered(self):
        return self.order_by(
            F("prod_date").asc(nulls_last=True),
            "received_date",
            "id",
        )

    def expiring_between(self, start, end):
        return self.filter(exp_date__gte=start, exp_date__lte=end)


class ProductBatch(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "Active", "Active"
        EXPIRED = "Expired", "Expired"
        DEPLETED = "Depleted", "Depleted"

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="batches",
    )

    batch_number = models.CharField(
        max_length=100,
        help_text="P{productId}-{YYYYMMDD}-{seq} when generated, or supplier-provided",
    )

    quantity = models.PositiveIntegerField(
        help_text="Remaining units (service-managed only)",
    )
    original_quantity = models.PositiveIntegerField(
        help_text="Units as received (immutable)",
    )

    prod_date = models.DateField(null=True, blank=True)
    exp_date = models.DateField(null=True, blank=True)
    received_date = models.DateTimeField(default=timezone.now)

    supplier = models.ForeignKey(
        "suppliers.Supplier",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="batches",
    )
    supplier_order = models.ForeignKey(
        "suppliers.SupplierOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="batches",
    )

    cost_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Per-unit cost of this receipt (may differ between batches)",
    )

    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BatchQuerySet.as_manager()

    class Meta:
        ordering = ["prod_date", "received_date", "id"]
        indexes = [
            models.Index(
                fields=["product", "status", "quantity", "prod_date"],
                name="idx_batch_fifo_scan",
            ),
            models.Index(fields=["product", "exp_date"], name="idx_batch_product_exp"),
            models.Index(fields=["exp_date"], name="idx_batch_exp"),
            models.Index(fields=["status", "quantity"], name="idx_batch_status_qty"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["product", "batch_number"],
                name="uniq_batch_number_per_product",
            ),
            models.CheckConstraint(
                condition=Q(original_quantity__gt=0),
                name="chk_batch_original_qty_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=0),
                name="chk_batch_qty_gte_zero",
            ),
            models.CheckConstraint(
                condition=Q(quantity__lte=F("original_quantity")),
                name="chk_batch_qty_lte_original",
            ),
            models.CheckConstraint(
                condition=Q(prod_date__isnull=True)
                | Q(exp_date__isnull=True)
                | Q(exp_date__gt=F("prod_date")),
                name="chk_batch_exp_after_prod",
            ),
        ]

    # -------------------------------------------------
    # VALIDATION
    # -------------------------------------------------

    def clean(self):
        if not (self.batch_number or "").strip():
            raise ValidationError({"batch_number": "batch_number is required"})

        if self.original_quantity is None or self.original_quantity <= 0:
            raise ValidationError(
                {"original_quantity": "original_quantity must be greater than zero"}
            )

        if self.quantity is None or self.quantity < 0:
            raise ValidationError({"quantity": "quantity cannot be negative"})

        if self.quantity > self.original_quantity:
            raise ValidationError(
                {"quantity": "quantity cannot exceed original_quantity"}
            )

        if self.prod_date and self.exp_date and self.exp_date <= self.prod_date:
            raise ValidationError({"exp_date": "exp_date must be after prod_date"})

        if self.cost_price is not None and self.cost_price < Decimal("0.00"):
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.status == self.Status.DEPLETED and self.quantity > 0:
            raise ValidationError({"status": "Depleted batch cannot hold stock"})

        if self.status == self.Status.ACTIVE and self.quantity == 0:
            raise ValidationError({"status": "Active batch must hold stock"})

    # -------------------------------------------------
    # IMMUTABILITY
    # -------------------------------------------------

    def save(self, *args, **kwargs):
        if self.batch_number is not None:
            self.batch_number = self.batch_number.strip()

        if not self._state.adding:
            original = ProductBatch.objects.only(
                "product_id",
                "batch_number",
                "original_quantity",
                "received_date",
                "quantity",
            ).get(pk=self.pk)

            for field in ("product_id", "batch_number", "original_quantity", "received_date"):
                if getattr(self, field) != getattr(original, field):
                    name = field.removesuffix("_id")
                    raise ValidationError({name: f"{name} is immutable"})

            if self.quantity > original.quantity:
                raise ValidationError(
                    {"quantity": "quantity cannot increase after receipt"}
                )

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if int(self.quantity or 0) > 0:
            raise ValidationError("Cannot delete a batch that still holds stock.")
        return super().delete(*args, **kwargs)

    # -------------------------------------------------
    # READ-ONLY HELPERS
    # -------------------------------------------------

    def days_until_expiry(self, today=None):
        if not self.exp_date:
            return None
        today = today or timezone.localdate()
        return (self.exp_date - today).days

    @property
    def is_expired_by_date(self) -> bool:
        days = self.days_until_expiry()
        return days is not None and days <= 0

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.batch_number}"
