from django.contrib import admin

from .models import Driver


@admin.register(Driver)
class DriverAdmin(admin.ModelAdmin):
    list_display = ("user", "pickup_zone", "status", "total_deliveries", "total_earnings")
    list_filter = ("pickup_zone", "status")
    search_fields = ("user__email", "user__first_name", "user__last_name")
    readonly_fields = ("total_deliveries", "total_earnings")
