"""
Validity check handlers.

ValidateLicenseHandler runs when a client activates; CheckLicenseHandler
on every periodic check. Both bump the license counters through the
compare-and-swap updater and record the outcome in the activity log.
GetLicenseInfoHandler is read-only.
"""
import logging
from typing import Optional

from activities.application.services.activity_recorder import ActivityRecorder
from activities.domain.activity import UNKNOWN_LICENSE_KEY
from core.domain.exceptions import InvalidCredentialsError, LicenseNotFoundError
from core.domain.value_objects import ActivityAction, ClientMetadata, Email, LicenseStatus
from core.infrastructure.events import event_bus
from core.metrics import license_checks_total
from licenses.application.commands.check_license import (
    CheckLicenseCommand,
    ValidateLicenseCommand,
)
from licenses.application.dto.license_dto import CheckResultDTO, LicenseInfoDTO
from licenses.application.queries.get_license_info import GetLicenseInfoQuery
from licenses.application.services.license_updater import LicenseUpdater
from licenses.domain.events import LicenseExpired
from licenses.domain.license import utcnow
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


def _normalize(email: str) -> Optional[str]:
    try:
        return str(Email(email))
    except ValueError:
        return None


class _ValidityCheckHandler:
    """Shared lookup, check, persist and record flow."""

    operation = ""
    action: ActivityAction = None
    touch_on_success = False

    def __init__(
        self,
        license_repository: LicenseRepository,
        recorder: ActivityRecorder,
        updater: LicenseUpdater = None,
    ):
        """Initialize handler with repository and activity recorder."""
        self.license_repository = license_repository
        self.recorder = recorder
        self.updater = updater or LicenseUpdater(license_repository)

    async def _check(self, email: str, license_key: str, client: ClientMetadata) -> CheckResultDTO:
        normalized = _normalize(email)
        found = None
        if normalized:
            found = await self.license_repository.find_by_email_and_key(normalized, license_key)

        if not found:
            license_checks_total.labels(operation=self.operation, result="invalid_credentials").inc()
            await self.recorder.record(
                license_key=UNKNOWN_LICENSE_KEY,
                email=normalized or email,
                action=self.action,
                success=False,
                client=client,
                error_message="Invalid credentials",
            )
            raise InvalidCredentialsError()

        now = utcnow()

        def transition(current):
            checked, result = current.check_validity(now)
            if result.valid and self.touch_on_success:
                checked = checked.touch(client, now)
            return checked, result

        outcome = await self.updater.update(found.key, transition)
        result = outcome.result

        if outcome.before.is_live and outcome.after.status == LicenseStatus.EXPIRED:
            await event_bus.publish(LicenseExpired(license_key=found.key, occurred_at=now))

        license_checks_total.labels(
            operation=self.operation, result="valid" if result.valid else "invalid"
        ).inc()
        await self.recorder.record(
            license_key=found.key,
            email=normalized,
            action=self.action,
            success=result.valid,
            client=client,
            error_message=result.reason,
        )
        if not result.valid:
            logger.info("License %s failed %s: %s", found.key, self.operation, result.reason)
        return CheckResultDTO.from_result(outcome.after, result, now)


class ValidateLicenseHandler(_ValidityCheckHandler):
    """Handler for ValidateLicenseCommand."""

    operation = "validate"
    action = ActivityAction.LICENSE_ACTIVATED
    touch_on_success = True

    async def handle(self, command: ValidateLicenseCommand) -> CheckResultDTO:
        """
        Handle validate (activate) command.

        Client details are stored on the license only when it is valid.

        Args:
            command: ValidateLicenseCommand

        Returns:
            CheckResultDTO; ``valid`` is False with a reason when the
            license exists but fails the check

        Raises:
            InvalidCredentialsError: If the email + key pair does not match
        """
        return await self._check(command.email, command.license_key, command.client)


class CheckLicenseHandler(_ValidityCheckHandler):
    """Handler for CheckLicenseCommand."""

    operation = "check"
    action = ActivityAction.LICENSE_CHECKED

    async def handle(self, command: CheckLicenseCommand) -> CheckResultDTO:
        """
        Handle periodic check command.

        Raises:
            InvalidCredentialsError: If the email + key pair does not match
        """
        return await self._check(command.email, command.license_key, command.client)


class GetLicenseInfoHandler:
    """Handler for GetLicenseInfoQuery."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repository."""
        self.license_repository = license_repository

    async def handle(self, query: GetLicenseInfoQuery) -> LicenseInfoDTO:
        """
        Handle get license info query.

        Nothing is written; the validity flag is computed fresh.

        Raises:
            LicenseNotFoundError: If the email + key pair does not match
        """
        email = _normalize(query.email)
        license = None
        if email:
            license = await self.license_repository.find_by_email_and_key(email, query.license_key)
        if not license:
            raise LicenseNotFoundError()

        now = utcnow()
        return LicenseInfoDTO(
            email=str(license.email),
            license_type=license.license_type.value,
            status=license.status.value,
            features=license.features.to_dict(),
            activated_at=license.activated_at,
            expires_at=license.expires_at,
            days_left=license.whole_days_left(now),
            is_valid=license.is_valid(now),
        )
