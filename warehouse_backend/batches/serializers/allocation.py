# batches/serializers/allocation.py

from rest_framework import serializers


class AllocationRequestSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class AllocationLineInputSerializer(serializers.Serializer):
    batch_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)


class ManualPlanSerializer(serializers.Serializer):
    product_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1)
    selections = AllocationLineInputSerializer(many=True, allow_empty=False)


class CommitSerializer(serializers.Serializer):
    lines = AllocationLineInputSerializer(many=True, allow_empty=False)


class ExpiringQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=0, required=False)
