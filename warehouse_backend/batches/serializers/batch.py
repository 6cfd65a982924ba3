# batches/serializers/batch.py

"""
======================================================
PATH: batches/serializers/batch.py
======================================================
BATCH SERIALIZERS

Purpose:
- Read-only ProductBatch representation (quantities are service-managed).
- Input shapes for receiving and conflict checks.

Deep validation (dates, provenance, duplicates) lives in services;
these serializers only enforce types.
"""

from rest_framework import serializers

from batches.models import ProductBatch


class ProductBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    days_until_expiry = serializers.SerializerMethodField()
    is_expired_by_date = serializers.BooleanField(read_only=True)

    class Meta:
        model = ProductBatch
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "batch_number",
            "quantity",
            "original_quantity",
            "prod_date",
            "exp_date",
            "days_until_expiry",
            "is_expired_by_date",
            "received_date",
            "supplier",
            "supplier_order",
            "cost_price",
            "status",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_days_until_expiry(self, obj):
        return obj.days_until_expiry()


class ReceiveBatchSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    prod_date = serializers.DateField(required=False, allow_null=True)
    exp_date = serializers.DateField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    supplier_order_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    cost_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    batch_number = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=100,
        help_text="Supplier batch reference (optional; generated if missing).",
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ConflictCheckSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    prod_date = serializers.DateField(required=False, allow_null=True)
    exp_date = serializers.DateField(required=False, allow_null=True)
