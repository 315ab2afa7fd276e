from django.contrib import admin

from .models import LoyaltyAccount, LoyaltyTransaction


@admin.register(LoyaltyAccount)
class LoyaltyAccountAdmin(admin.ModelAdmin):
    list_display = ("customer", "points_balance", "lifetime_points", "updated_at")
    search_fields = ("customer__email",)
    readonly_fields = ("points_balance", "lifetime_points")


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(admin.ModelAdmin):
    list_display = ("customer", "transaction_type", "points", "order", "voucher", "created_at")
    list_filter = ("transaction_type",)
    search_fields = ("customer__email", "order__order_number", "voucher__code")

    def has_change_permission(self, request, obj=None):
        return False
