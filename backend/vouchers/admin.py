from django.contrib import admin

from .models import Voucher


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "discount_type",
        "discount_value",
        "usage_count",
        "usage_limit",
        "status",
        "valid_until",
    )
    list_filter = ("status", "discount_type")
    search_fields = ("code", "description")
    # Usage is owned by VoucherLedger.
    readonly_fields = ("usage_count", "created_at", "updated_at")
