"""
ActivityEvent Django ORM model.

This is the infrastructure layer model for the activity log.
Domain entities are in activities.domain.activity.
"""
import uuid

from django.db import models

from core.domain.value_objects import ActivityAction


class ActivityEvent(models.Model):
    """
    A client-reported action tied to a license key and email.

    Rows are append-only.
    """

    ACTION_CHOICES = [(action.value, action.value.replace("_", " ").title()) for action in ActivityAction]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.CharField(max_length=19, db_index=True)
    email = models.CharField(max_length=254)
    action = models.CharField(max_length=40, choices=ACTION_CHOICES)
    data = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True, help_text="Client ip, user agent and version")
    success = models.BooleanField(default=True)
    error_message = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "activity_events"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "created_at"], name="activity_email_created_idx"),
            models.Index(fields=["action", "created_at"], name="activity_action_created_idx"),
            models.Index(fields=["created_at"], name="activity_created_idx"),
        ]

    def __str__(self):
        return f"{self.email} {self.action} @ {self.created_at:%Y-%m-%d %H:%M}"
