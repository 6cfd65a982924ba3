# batches/admin.py

from django.contrib import admin, messages
from django.utils import timezone

from batches.conf import inventory_setting
from batches.models import ProductBatch
from batches.services import expire_batches
from permissions.roles import CAP_INVENTORY_ADJUST, user_has_capability


@admin.register(ProductBatch)
class ProductBatchAdmin(admin.ModelAdmin):
    """
    View-only batch list for audit visibility.
    Receiving and allocation happen through services, never here.
    """

    list_display = (
        "product",
        "batch_number",
        "prod_date",
        "exp_date",
        "original_quantity",
        "quantity",
        "status",
        "expiry_status",
        "received_date",
    )
    list_filter = ("status", "exp_date", "received_date")
    search_fields = ("batch_number", "product__name", "product__sku")
    ordering = ("prod_date", "received_date", "id")
    list_select_related = ("product",)
    actions = ["run_expiry_sweep"]

    readonly_fields = [f.name for f in ProductBatch._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False if obj else True

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Expiry status")
    def expiry_status(self, obj):
        days = obj.days_until_expiry()
        if days is None:
            return "-"
        if days <= 0:
            return "EXPIRED"
        if days <= inventory_setting("NEAR_EXPIRY_DAYS"):
            return f"SOON ({days}d)"
        return "OK"

    @admin.action(description="Run expiry sweep (mark Active batches expiring today or earlier Expired)")
    def run_expiry_sweep(self, request, queryset):
        if not user_has_capability(request.user, CAP_INVENTORY_ADJUST):
            self.message_user(request, "Not allowed to run the expiry sweep.", messages.ERROR)
            return
        count = expire_batches(timezone.localdate())
        self.message_user(request, f"{count} batch(es) marked Expired.", messages.SUCCESS)
