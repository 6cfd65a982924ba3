# suppliers/admin.py

from django.contrib import admin

from suppliers.models import Supplier, SupplierOrder, SupplierOrderItem


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "email", "phone")


class SupplierOrderItemInline(admin.TabularInline):
    model = SupplierOrderItem
    extra = 0
    fields = (
        "product",
        "quantity",
        "received_quantity",
        "prod_date",
        "exp_date",
        "cost_price",
        "batch_number",
    )
    autocomplete_fields = ("product",)


@admin.register(SupplierOrder)
class SupplierOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "supplier", "reference", "status", "received_at", "created_at")
    list_filter = ("status",)
    search_fields = ("reference", "supplier__name")
    readonly_fields = ("status", "received_at", "created_at")
    inlines = [SupplierOrderItemInline]
