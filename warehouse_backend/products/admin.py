# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:

- Product is created once; stock is never edited on the product.
- Stock arrives as ProductBatch rows through receiving (API / supplier orders).
- Batches are shown read-only on the product page for audit visibility.
"""

from __future__ import annotations

from django.contrib import admin

from batches.models import ProductBatch
from products.models import Category, Product


# =====================================================
# CATEGORY
# =====================================================

@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)
    ordering = ("name",)


# =====================================================
# BATCH INLINE (READ-ONLY)
# =====================================================

class ProductBatchInline(admin.TabularInline):
    model = ProductBatch

    extra = 0
    can_delete = False
    show_change_link = True

    fields = (
        "batch_number",
        "prod_date",
        "exp_date",
        "original_quantity",
        "quantity",
        "status",
        "received_date",
    )
    readonly_fields = fields
    ordering = ("prod_date", "received_date", "id")

    def has_add_permission(self, request, obj=None):
        return False


# =====================================================
# PRODUCT
# =====================================================

@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "sku",
        "name",
        "category",
        "total_stock_display",
        "is_low_stock",
        "is_active",
        "created_at",
    )
    list_filter = ("is_active", "category", "created_at")
    search_fields = ("sku", "name")
    ordering = ("-created_at",)
    readonly_fields = ("created_at", "updated_at")

    inlines = [ProductBatchInline]

    @admin.display(description="Total stock")
    def total_stock_display(self, obj):
        return obj.total_stock

    @admin.display(boolean=True, description="Low stock")
    def is_low_stock(self, obj):
        return obj.is_low_stock
