from django.contrib import admin

from .models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("entity_type", "entity_id", "action", "actor", "actor_role", "created_at")
    list_filter = ("entity_type", "action")
    search_fields = ("entity_id", "actor__email")

    def has_change_permission(self, request, obj=None):
        return False
