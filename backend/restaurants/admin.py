from django.contrib import admin

from .models import MenuItem, Restaurant


class MenuItemInline(admin.TabularInline):
    model = MenuItem
    extra = 0


@admin.register(Restaurant)
class RestaurantAdmin(admin.ModelAdmin):
    list_display = ("name", "region", "status", "owner", "min_order_amount")
    list_filter = ("region", "status")
    search_fields = ("name", "city", "owner__email")
    inlines = [MenuItemInline]
