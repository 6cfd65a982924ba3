# suppliers/api/serializers.py

from rest_framework import serializers

from suppliers.models import Supplier, SupplierOrder


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = "__all__"
        read_only_fields = ("id", "created_at")


class SupplierOrderItemCreateSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    received_quantity = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    prod_date = serializers.DateField(required=False, allow_null=True)
    exp_date = serializers.DateField(required=False, allow_null=True)
    cost_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    batch_number = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        prod = attrs.get("prod_date")
        exp = attrs.get("exp_date")
        if prod and exp and exp <= prod:
            raise serializers.ValidationError({"exp_date": "exp_date must be after prod_date"})
        return attrs


class SupplierOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField(min_value=1)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    items = SupplierOrderItemCreateSerializer(many=True, allow_empty=False)


class SupplierOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = serializers.SerializerMethodField()

    class Meta:
        model = SupplierOrder
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "reference",
            "status",
            "received_at",
            "created_at",
            "items",
        ]

    def get_items(self, obj):
        qs = obj.items.select_related("product").all()
        return [
            {
                "id": it.id,
                "product_id": it.product_id,
                "product_name": getattr(it.product, "name", ""),
                "quantity": it.quantity,
                "received_quantity": it.received_quantity,
                "prod_date": it.prod_date,
                "exp_date": it.exp_date,
                "cost_price": str(it.cost_price) if it.cost_price is not None else None,
                "batch_number": it.batch_number,
            }
            for it in qs
        ]
