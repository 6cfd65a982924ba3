# products/serializers/product.py

"""
PRODUCT SERIALIZER

Purpose:
- Read-only product view for receivers and pickers.
- Stock is derived from batches only (single source of truth).
"""

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """
    GUARANTEES:
    - total_stock counts Active batches only
    - Uses the queryset annotation when present (no N+1 on lists)
    """

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    total_stock = serializers.SerializerMethodField()
    is_low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "sku",
            "name",
            "category",
            "category_name",
            "low_stock_threshold",
            "total_stock",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_total_stock(self, obj) -> int:
        annotated = getattr(obj, "available_stock", None)
        if annotated is not None:
            return int(annotated)
        return obj.total_stock

    def get_is_low_stock(self, obj) -> bool:
        return self.get_total_stock(obj) <= int(obj.low_stock_threshold or 0)
