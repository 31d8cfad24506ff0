import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="License",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("key", models.CharField(max_length=19, unique=True)),
                ("email", models.EmailField(max_length=254)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("active", "Active"),
                            ("trial", "Trial"),
                            ("expired", "Expired"),
                            ("revoked", "Revoked"),
                        ],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "license_type",
                    models.CharField(
                        choices=[
                            ("trial", "Trial"),
                            ("basic", "Basic"),
                            ("pro", "Pro"),
                            ("enterprise", "Enterprise"),
                            ("custom", "Custom"),
                        ],
                        default="basic",
                        max_length=20,
                    ),
                ),
                ("features", models.JSONField(default=dict)),
                ("activated_at", models.DateTimeField()),
                ("expires_at", models.DateTimeField()),
                ("last_checked", models.DateTimeField(blank=True, null=True)),
                ("check_count", models.PositiveIntegerField(default=0)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("revoked", models.BooleanField(default=False)),
                ("revoked_reason", models.CharField(blank=True, max_length=500, null=True)),
                ("revoked_at", models.DateTimeField(blank=True, null=True)),
                ("version", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
            ],
            options={
                "db_table": "licenses",
                "ordering": ["-created_at"],
            },
        ),
        migrations.AddIndex(
            model_name="license",
            index=models.Index(fields=["email", "status"], name="licenses_email_status_idx"),
        ),
        migrations.AddIndex(
            model_name="license",
            index=models.Index(fields=["expires_at"], name="licenses_expires_at_idx"),
        ),
        migrations.AddConstraint(
            model_name="license",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status__in", ["active", "trial"])),
                fields=("email",),
                name="unique_live_license_per_email",
            ),
        ),
    ]
