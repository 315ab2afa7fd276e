from django.contrib import admin

from .models import ProcessedWebhookEvent


@admin.register(ProcessedWebhookEvent)
class ProcessedWebhookEventAdmin(admin.ModelAdmin):
    list_display = ("event_id", "event_type", "outcome", "order", "processed_at")
    list_filter = ("event_type", "outcome")
    search_fields = ("event_id", "payment_reference", "order__order_number")

    def has_change_permission(self, request, obj=None):
        return False
