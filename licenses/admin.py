"""
Django admin configuration for licenses app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import License


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "key",
        "email",
        "license_type",
        "status_display",
        "check_count",
        "last_checked",
        "expires_at",
        "created_at",
    ]
    list_filter = ["status", "license_type", "revoked", "expires_at", "created_at"]
    search_fields = ["key", "email", "revoked_reason"]
    readonly_fields = [
        "id",
        "key",
        "version",
        "check_count",
        "last_checked",
        "metadata_display",
        "created_at",
        "updated_at",
    ]
    exclude = ["metadata"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "key", "email", "license_type", "status"),
            },
        ),
        (
            "Entitlements",
            {
                "fields": ("features", "activated_at", "expires_at"),
            },
        ),
        (
            "Revocation",
            {
                "fields": ("revoked", "revoked_reason", "revoked_at"),
            },
        ),
        (
            "Usage",
            {
                "fields": ("check_count", "last_checked", "metadata_display"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("version", "created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "trial": "blue",
            "revoked": "red",
            "expired": "gray",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def metadata_display(self, obj):
        """Display client metadata in a formatted way."""
        if obj.metadata:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.metadata, indent=2),
            )
        return "-"

    metadata_display.short_description = "Metadata"
