"""
Django admin configuration for activities app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from activities.infrastructure.models import ActivityEvent


@admin.register(ActivityEvent)
class ActivityEventAdmin(admin.ModelAdmin):
    """Admin interface for ActivityEvent model. Events are read-only."""

    list_display = ["action", "email", "license_key", "success", "created_at"]
    list_filter = ["action", "success", "created_at"]
    search_fields = ["email", "license_key"]
    readonly_fields = [
        "id",
        "license_key",
        "email",
        "action",
        "data_display",
        "metadata",
        "success",
        "error_message",
        "created_at",
    ]
    exclude = ["data"]

    def data_display(self, obj):
        """Display the client payload in a formatted way."""
        if obj.data:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.data, indent=2),
            )
        return "-"

    data_display.short_description = "Data"

    def has_add_permission(self, request):
        """Activity events are append-only from the API."""
        return False

    def has_change_permission(self, request, obj=None):
        """Activity events are read-only."""
        return False
