"""
LogActivityHandler.

Handles client-reported activity.
"""
import logging
from datetime import datetime, timezone

from activities.application.commands.log_activity import LogActivityCommand
from activities.domain.activity import ActivityEvent
from activities.ports.activity_repository import ActivityRepository
from core.domain.exceptions import ActivityUnauthorizedError, DomainException
from core.domain.value_objects import ActivityAction, Email
from core.metrics import activity_events_total
from licenses.application.services.license_updater import LicenseUpdater
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class LogActivityHandler:
    """Handler for LogActivityCommand."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        activity_repository: ActivityRepository,
        updater: LicenseUpdater = None,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.activity_repository = activity_repository
        self.updater = updater or LicenseUpdater(license_repository)

    async def handle(self, command: LogActivityCommand) -> ActivityEvent:
        """
        Handle log activity command.

        Args:
            command: LogActivityCommand

        Returns:
            Stored ActivityEvent

        Raises:
            ActivityUnauthorizedError: If the email has no live license
        """
        email = str(Email(command.email))
        license = await self.license_repository.find_live_by_email(email)
        if not license:
            raise ActivityUnauthorizedError()

        now = datetime.now(timezone.utc)
        event = ActivityEvent.create(
            license_key=license.key,
            email=email,
            action=ActivityAction(command.action),
            data=command.data,
            client=command.client,
            now=now,
        )
        stored = await self.activity_repository.add(event)
        activity_events_total.labels(action=event.action.value).inc()

        # The event is logged; last_checked is best effort
        try:
            await self.updater.update(license.key, lambda current: (current.mark_seen(now), None))
        except DomainException as e:
            logger.warning("Could not update last_checked for %s: %s", license.key, e.message)

        return stored
