"""
IssueLicenseHandler.

Handles the issue license command for both the admin and the
self-service surfaces.
"""
import logging

from django.conf import settings

from core.domain.exceptions import DuplicateActiveLicenseError, KeyCollisionError
from core.domain.value_objects import Email, LicenseType
from core.infrastructure.events import event_bus
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.domain.events import LicenseIssued
from licenses.domain.license import License, utcnow
from licenses.domain.license_key import KeyGenerator
from licenses.domain.services import IssuancePolicy
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class IssueLicenseHandler:
    """Handler for IssueLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        key_generator: KeyGenerator = None,
        policy: IssuancePolicy = None,
        max_key_attempts: int = None,
    ):
        """Initialize handler with repository and issuance collaborators."""
        self.license_repository = license_repository
        self.key_generator = key_generator or KeyGenerator.from_settings(settings)
        self.policy = policy or IssuancePolicy.from_settings(settings)
        self.max_key_attempts = max_key_attempts or getattr(settings, "LICENSE_KEY_MAX_ATTEMPTS", 5)

    async def handle(self, command: IssueLicenseCommand) -> License:
        """
        Handle issue license command.

        The live-license lookup is a fast path; the store's unique
        constraint is what closes the race between two issuers.

        Args:
            command: IssueLicenseCommand

        Returns:
            Issued License entity

        Raises:
            DuplicateActiveLicenseError: If the email already has a live license
            KeyCollisionError: If no free key was found
            ValueError: If the type, days or feature overrides are invalid
        """
        email = str(Email(command.email))
        license_type = LicenseType(command.license_type)

        if await self.license_repository.find_live_by_email(email):
            raise DuplicateActiveLicenseError()

        duration = self.policy.duration_for(license_type, command.days)
        features = self.policy.features_for(license_type, command.feature_overrides)
        now = utcnow()

        for attempt in range(1, self.max_key_attempts + 1):
            candidate = License.create(
                key=self.key_generator.generate(),
                email=email,
                license_type=license_type,
                features=features,
                duration_days=duration,
                notes=command.notes,
                now=now,
            )
            try:
                issued = await self.license_repository.add(candidate)
                break
            except KeyCollisionError:
                logger.warning(
                    "License key collision (attempt %d/%d)", attempt, self.max_key_attempts
                )
        else:
            raise KeyCollisionError(
                f"Could not generate a unique license key after {self.max_key_attempts} attempts"
            )

        logger.info("License issued: %s (%s) for %s", issued.key, license_type.value, email)
        await event_bus.publish(
            LicenseIssued(
                license_key=issued.key,
                email=email,
                license_type=license_type.value,
                expires_at=issued.expires_at,
            )
        )
        return issued
