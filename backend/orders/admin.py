from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("menu_item", "name", "unit_price", "quantity", "line_subtotal", "special_instructions")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "status",
        "payment_status",
        "restaurant",
        "customer",
        "guest_email",
        "driver",
        "total_amount",
        "created_at",
    )
    list_filter = ("status", "payment_status", "restaurant__region")
    search_fields = ("order_number", "customer__email", "guest_email", "payment_reference")
    inlines = [OrderItemInline]
    # Status and money only change through the fulfillment and payment services.
    readonly_fields = (
        "order_number",
        "status",
        "driver",
        "subtotal",
        "delivery_fee",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_status",
        "payment_reference",
        "voucher",
        "voucher_code",
        "delivery_code",
        "actual_delivery_time",
        "created_at",
        "updated_at",
    )
