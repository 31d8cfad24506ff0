"""
Django management command to check and mark expired licenses.

This command should be run periodically (e.g., via cron); the Celery
beat schedule runs the same sweep hourly.
"""

import asyncio
import logging

from django.core.management.base import BaseCommand

from licenses.application.services.expiry_sweeper import ExpirySweeper
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to check and mark expired licenses."""

    help = "Check and mark expired licenses"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Dry run mode - don't actually update licenses",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        sweeper = ExpirySweeper(DjangoLicenseRepository())

        if options["dry_run"]:
            overdue = asyncio.run(sweeper.find_overdue())
            self.stdout.write(f"Found {len(overdue)} expired license(s)")
            # pylint: disable=no-member
            self.stdout.write(self.style.WARNING("DRY RUN - No changes will be made"))
            for key in overdue[:10]:
                self.stdout.write(f"  - {key}")
            return

        expired = asyncio.run(sweeper.sweep())
        self.stdout.write(
            # pylint: disable=no-member
            self.style.SUCCESS(f"Successfully marked {len(expired)} license(s) as expired")
        )
