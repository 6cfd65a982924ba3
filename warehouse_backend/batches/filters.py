# batches/filters.py

"""
Batch listing filters (django-filter).

Default listing hides Expired and Depleted batches unless an explicit
`status` is requested or include_expired / include_depleted is set.
"""

import django_filters

from batches.models import ProductBatch


class ProductBatchFilter(django_filters.FilterSet):
    product = django_filters.NumberFilter(field_name="product_id")
    supplier = django_filters.NumberFilter(field_name="supplier_id")
    status = django_filters.ChoiceFilter(choices=ProductBatch.Status.choices)
    batch_number = django_filters.CharFilter(field_name="batch_number", lookup_expr="icontains")
    exp_before = django_filters.DateFilter(field_name="exp_date", lookup_expr="lte")
    exp_after = django_filters.DateFilter(field_name="exp_date", lookup_expr="gte")
    include_expired = django_filters.BooleanFilter(method="_flag")
    include_depleted = django_filters.BooleanFilter(method="_flag")

    class Meta:
        model = ProductBatch
        fields = ["product", "supplier", "status", "batch_number"]

    def _flag(self, queryset, name, value):
        return queryset

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        data = self.form.cleaned_data

        if data.get("status"):
            return queryset

        hidden = []
        if not data.get("include_expired"):
            hidden.append(ProductBatch.Status.EXPIRED)
        if not data.get("include_depleted"):
            hidden.append(ProductBatch.Status.DEPLETED)

        if hidden:
            queryset = queryset.exclude(status__in=hidden)
        return queryset
