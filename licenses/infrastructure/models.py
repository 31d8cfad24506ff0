"""
License model.
"""
import uuid

from django.db import models
from django.db.models import Q

LIVE_STATUSES = ["active", "trial"]


class License(models.Model):
    """
    A time-limited license owned by an email address.

    At most one live (active/trial) license may exist per email; the
    partial unique constraint below enforces it at the database level.
    ``version`` is bumped on every update for compare-and-swap writes.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("trial", "Trial"),
        ("expired", "Expired"),
        ("revoked", "Revoked"),
    ]

    TYPE_CHOICES = [
        ("trial", "Trial"),
        ("basic", "Basic"),
        ("pro", "Pro"),
        ("enterprise", "Enterprise"),
        ("custom", "Custom"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=19, unique=True)
    email = models.EmailField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    license_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="basic")
    features = models.JSONField(default=dict)
    activated_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    last_checked = models.DateTimeField(null=True, blank=True)
    check_count = models.PositiveIntegerField(default=0)
    metadata = models.JSONField(default=dict, blank=True)
    revoked = models.BooleanField(default=False)
    revoked_reason = models.CharField(max_length=500, null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["email", "status"], name="licenses_email_status_idx"),
            models.Index(fields=["expires_at"], name="licenses_expires_at_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["email"],
                condition=Q(status__in=LIVE_STATUSES),
                name="unique_live_license_per_email",
            ),
        ]

    def __str__(self):
        return f"{self.key} ({self.email}, {self.status})"
