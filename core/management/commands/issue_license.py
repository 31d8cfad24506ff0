"""
Django management command to issue licenses from the command line.

Examples:
    python manage.py issue_license --email user@example.com --type pro
    python manage.py issue_license --email user@example.com --type custom --days 90
    python manage.py issue_license --list
"""

import asyncio

from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import DomainException
from core.domain.value_objects import LicenseType
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository


class Command(BaseCommand):
    """Command to issue a license or list recent ones."""

    help = "Issue a license for an email address, or list recent licenses"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("--email", type=str, help="Owner email address")
        parser.add_argument(
            "--type",
            type=str,
            default=LicenseType.BASIC.value,
            choices=[t.value for t in LicenseType],
            help="License type (default: basic)",
        )
        parser.add_argument(
            "--days",
            type=int,
            default=None,
            help="Duration in days (default: the type's duration)",
        )
        parser.add_argument("--notes", type=str, default=None, help="Operator notes")
        parser.add_argument(
            "--list",
            action="store_true",
            help="List the 10 most recent licenses instead of issuing",
        )

    def handle(self, *args, **options):
        """Execute the command."""
        repository = DjangoLicenseRepository()

        if options["list"]:
            licenses, total = asyncio.run(repository.list(limit=10))
            self.stdout.write(f"Showing {len(licenses)} of {total} license(s)")
            for license in licenses:
                self.stdout.write(
                    f"  {license.key}  {license.email}  {license.license_type.value:<10} "
                    f"{license.status.value:<8} expires {license.expires_at:%Y-%m-%d}"
                )
            return

        if not options["email"]:
            raise CommandError("--email is required unless --list is given")
        if options["days"] is not None and options["days"] <= 0:
            raise CommandError("--days must be positive")

        handler = IssueLicenseHandler(repository)
        try:
            license = asyncio.run(
                handler.handle(
                    IssueLicenseCommand(
                        email=options["email"],
                        license_type=options["type"],
                        days=options["days"],
                        notes=options["notes"],
                    )
                )
            )
        except (DomainException, ValueError) as e:
            raise CommandError(str(e)) from e

        # pylint: disable=no-member
        self.stdout.write(self.style.SUCCESS("License issued"))
        self.stdout.write(f"  Key:     {license.key}")
        self.stdout.write(f"  Email:   {license.email}")
        self.stdout.write(f"  Type:    {license.license_type.value}")
        self.stdout.write(f"  Status:  {license.status.value}")
        self.stdout.write(f"  Expires: {license.expires_at.isoformat()}")
