import django.db.models.deletion
import django.db.models.expressions
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
        ("suppliers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ProductBatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "batch_number",
                    models.CharField(
                        help_text="P{productId}-{YYYYMMDD}-{seq} when generated, or supplier-provided",
                        max_length=100,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(help_text="Remaining units (service-managed only)")),
                ("original_quantity", models.PositiveIntegerField(help_text="Units as received (immutable)")),
                ("prod_date", models.DateField(blank=True, null=True)),
                ("exp_date", models.DateField(blank=True, null=True)),
                ("received_date", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "cost_price",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Per-unit cost of this receipt (may differ between batches)",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("Active", "Active"), ("Expired", "Expired"), ("Depleted", "Depleted")],
                        default="Active",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="batches",
                        to="products.product",
                    ),
                ),
                (
                    "supplier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="batches",
                        to="suppliers.supplier",
                    ),
                ),
                (
                    "supplier_order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="batches",
                        to="suppliers.supplierorder",
                    ),
                ),
            ],
            options={
                "ordering": ["prod_date", "received_date", "id"],
                "indexes": [
                    models.Index(
                        fields=["product", "status", "quantity", "prod_date"],
                        name="idx_batch_fifo_scan",
                    ),
                    models.Index(fields=["product", "exp_date"], name="idx_batch_product_exp"),
                    models.Index(fields=["exp_date"], name="idx_batch_exp"),
                    models.Index(fields=["status", "quantity"], name="idx_batch_status_qty"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("product", "batch_number"),
                        name="uniq_batch_number_per_product",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("original_quantity__gt", 0)),
                        name="chk_batch_original_qty_gt_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__gte", 0)),
                        name="chk_batch_qty_gte_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("quantity__lte", django.db.models.expressions.F("original_quantity"))),
                        name="chk_batch_qty_lte_original",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("prod_date__isnull", True),
                            ("exp_date__isnull", True),
                            ("exp_date__gt", django.db.models.expressions.F("prod_date")),
                            _connector="OR",
                        ),
                        name="chk_batch_exp_after_prod",
                    ),
                ],
            },
        ),
    ]
