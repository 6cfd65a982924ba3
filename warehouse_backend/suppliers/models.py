# suppliers/models.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from products.models.product import Product


class Supplier(models.Model):
    """
    Supplier master.
    """

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["name"], name="idx_supplier_name"),
            models.Index(fields=["is_active"], name="idx_supplier_active"),
        ]

    def __str__(self):
        return self.name


class SupplierOrder(models.Model):
    """
    Inbound delivery from a supplier.

    Receiving is performed by services:
    - every line becomes one ProductBatch (receipt-dated, supplier-dated)
    - date conflicts against existing stock are collected, never blocking
    - order is marked RECEIVED in the same transaction
    """

    STATUS_PENDING = "Pending"
    STATUS_RECEIVED = "Received"
    STATUS_CANCELLED = "Cancelled"

    STATUSES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_RECEIVED, "Received"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    reference = models.CharField(max_length=64, blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_PENDING)

    received_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="idx_suporder_status_created"),
        ]

    def clean(self):
        if self.status == self.STATUS_RECEIVED and not self.received_at:
            raise ValidationError(
                {"received_at": "received_at is required when status is Received"}
            )

        if self.status == self.STATUS_CANCELLED and self.received_at:
            raise ValidationError(
                {"received_at": "received_at must be empty when status is Cancelled"}
            )

    def save(self, *args, **kwargs):
        if self.reference is not None:
            self.reference = self.reference.strip()

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        ref = self.reference or f"#{self.pk}"
        return f"{ref} ({self.supplier.name})"


class SupplierOrderItem(models.Model):
    """
    Supplier order line.

    Production/expiry dates are whatever the supplier declared; both are optional.
    received_quantity (when set) overrides the ordered quantity at receipt time.
    """

    order = models.ForeignKey(
        SupplierOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="supplier_order_items",
    )

    quantity = models.PositiveIntegerField()
    received_quantity = models.PositiveIntegerField(null=True, blank=True)

    prod_date = models.DateField(null=True, blank=True)
    exp_date = models.DateField(null=True, blank=True)

    cost_price = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )

    batch_number = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="supplier_order_item_quantity_gt_zero",
            ),
        ]

    def clean(self):
        if self.cost_price is not None and self.cost_price < Decimal("0.00"):
            raise ValidationError({"cost_price": "cost_price cannot be negative"})

        if self.prod_date and self.exp_date and self.exp_date <= self.prod_date:
            raise ValidationError({"exp_date": "exp_date must be after prod_date"})

    @property
    def quantity_to_receive(self) -> int:
        if self.received_quantity is not None:
            return int(self.received_quantity)
        return int(self.quantity)

    def save(self, *args, **kwargs):
        if self.batch_number is not None:
            self.batch_number = self.batch_number.strip()
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} x {self.quantity}"
