import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ActivityEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("license_key", models.CharField(db_index=True, max_length=19)),
                ("email", models.CharField(max_length=254)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("license_activated", "License Activated"),
                            ("license_checked", "License Checked"),
                            ("license_deactivated", "License Deactivated"),
                            ("threads_extracted", "Threads Extracted"),
                            ("posting_started", "Posting Started"),
                            ("posting_completed", "Posting Completed"),
                            ("posting_stopped", "Posting Stopped"),
                            ("settings_updated", "Settings Updated"),
                            ("error_occurred", "Error Occurred"),
                        ],
                        max_length=40,
                    ),
                ),
                ("data", models.JSONField(blank=True, default=dict)),
                (
                    "metadata",
                    models.JSONField(
                        blank=True, default=dict, help_text="Client ip, user agent and version"
                    ),
                ),
                ("success", models.BooleanField(default=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField()),
            ],
            options={
                "db_table": "activity_events",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="activityevent",
            index=models.Index(fields=["email", "created_at"], name="activity_email_created_idx"),
        ),
        migrations.AddIndex(
            model_name="activityevent",
            index=models.Index(fields=["action", "created_at"], name="activity_action_created_idx"),
        ),
        migrations.AddIndex(
            model_name="activityevent",
            index=models.Index(fields=["created_at"], name="activity_created_idx"),
        ),
    ]
