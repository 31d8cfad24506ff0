"""
License lifecycle handlers.

Handlers for revoke, reactivate, and extend license commands. Each
one runs its transition through the compare-and-swap updater and
publishes an event when something changed.
"""
import logging

from django.conf import settings

from core.domain.value_objects import LicenseStatus
from core.infrastructure.events import event_bus
from licenses.application.commands.extend_license import ExtendLicenseCommand
from licenses.application.commands.reactivate_license import ReactivateLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.services.license_updater import LicenseUpdater
from licenses.domain.events import LicenseExtended, LicenseReactivated, LicenseRevoked
from licenses.domain.license import License, utcnow
from licenses.domain.services import ExtensionPolicy
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class RevokeLicenseHandler:
    """Handler for RevokeLicenseCommand."""

    def __init__(self, license_repository: LicenseRepository, updater: LicenseUpdater = None):
        """Initialize handler with repository."""
        self.license_repository = license_repository
        self.updater = updater or LicenseUpdater(license_repository)

    async def handle(self, command: RevokeLicenseCommand) -> License:
        """
        Handle revoke license command.

        Revoking an already revoked license changes nothing.

        Args:
            command: RevokeLicenseCommand

        Returns:
            Revoked License entity

        Raises:
            LicenseNotFoundError: If license not found
        """
        now = utcnow()
        outcome = await self.updater.update(
            command.license_key, lambda current: (current.revoke(command.reason, now), None)
        )

        if outcome.changed:
            logger.info("License revoked: %s - Reason: %s", command.license_key, command.reason)
            await event_bus.publish(
                LicenseRevoked(license_key=command.license_key, reason=command.reason, occurred_at=now)
            )
        return outcome.after


class ReactivateLicenseHandler:
    """Handler for ReactivateLicenseCommand."""

    def __init__(self, license_repository: LicenseRepository, updater: LicenseUpdater = None):
        """Initialize handler with repository."""
        self.license_repository = license_repository
        self.updater = updater or LicenseUpdater(license_repository)

    async def handle(self, command: ReactivateLicenseCommand) -> License:
        """
        Handle reactivate license command.

        Args:
            command: ReactivateLicenseCommand

        Returns:
            Reactivated License entity

        Raises:
            LicenseNotFoundError: If license not found
            InvalidTransitionError: If the license is not revoked
            DuplicateActiveLicenseError: If the email holds another live license
        """
        now = utcnow()
        outcome = await self.updater.update(
            command.license_key, lambda current: (current.reactivate(now), None)
        )

        logger.info("License reactivated: %s", command.license_key)
        await event_bus.publish(LicenseReactivated(license_key=command.license_key, occurred_at=now))
        return outcome.after


class ExtendLicenseHandler:
    """Handler for ExtendLicenseCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        policy: ExtensionPolicy = None,
        updater: LicenseUpdater = None,
    ):
        """Initialize handler with repository and extension policy."""
        self.license_repository = license_repository
        self.policy = policy or ExtensionPolicy.from_settings(settings)
        self.updater = updater or LicenseUpdater(license_repository)

    async def handle(self, command: ExtendLicenseCommand) -> License:
        """
        Handle extend license command.

        Args:
            command: ExtendLicenseCommand

        Returns:
            Extended License entity

        Raises:
            LicenseNotFoundError: If license not found
            InvalidTransitionError: If days is not positive or the policy refuses
            DuplicateActiveLicenseError: If reviving would create a second live license
        """
        now = utcnow()
        outcome = await self.updater.update(
            command.license_key,
            lambda current: (self.policy.apply(current, command.days, now), None),
        )

        extended = outcome.after
        if outcome.before.status == LicenseStatus.EXPIRED and extended.status == LicenseStatus.ACTIVE:
            logger.info("Expired license %s is active again", command.license_key)
        logger.info("License extended: %s - Days: %d", command.license_key, command.days)
        await event_bus.publish(
            LicenseExtended(
                license_key=command.license_key,
                days=command.days,
                new_expiration=extended.expires_at,
                occurred_at=now,
            )
        )
        return extended
