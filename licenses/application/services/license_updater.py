"""
License updater service.

Runs a pure lifecycle transition against the stored license with
compare-and-swap persistence, reloading and recomputing on conflict.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from django.conf import settings

from core.domain.exceptions import ConcurrentUpdateError, LicenseNotFoundError
from core.metrics import license_update_conflicts_total
from licenses.domain.license import License
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

Transition = Callable[[License], Tuple[License, Any]]


@dataclass
class UpdateOutcome:
    """Stored state before and after a transition, plus its result."""

    before: License
    after: License
    result: Any = None

    @property
    def changed(self) -> bool:
        return self.before != self.after


class LicenseUpdater:
    """Load, transition, persist-if-changed loop for one license."""

    def __init__(self, license_repository: LicenseRepository, max_attempts: Optional[int] = None):
        """
        Initialize updater.

        Args:
            license_repository: Store holding the license
            max_attempts: Attempts before giving up (defaults to LICENSE_UPDATE_MAX_ATTEMPTS)
        """
        self.license_repository = license_repository
        self.max_attempts = max_attempts or getattr(settings, "LICENSE_UPDATE_MAX_ATTEMPTS", 5)

    async def update(self, license_key: str, transition: Transition) -> UpdateOutcome:
        """
        Apply a transition to the stored license.

        The transition may be called several times, once per attempt,
        always with the freshest stored state. Its result from a failed
        attempt is discarded.

        Args:
            license_key: Key of the license to update
            transition: Pure function returning (new license, result)

        Returns:
            UpdateOutcome of the attempt that was persisted

        Raises:
            LicenseNotFoundError: If no license has this key
            ConcurrentUpdateError: If every attempt lost the race
        """
        for attempt in range(1, self.max_attempts + 1):
            current = await self.license_repository.find_by_key(license_key)
            if current is None:
                raise LicenseNotFoundError()

            updated, result = transition(current)
            if updated == current:
                return UpdateOutcome(before=current, after=current, result=result)

            try:
                saved = await self.license_repository.save(updated)
            except ConcurrentUpdateError:
                license_update_conflicts_total.inc()
                logger.debug(
                    "Concurrent update on %s (attempt %d/%d)",
                    license_key,
                    attempt,
                    self.max_attempts,
                )
                continue
            return UpdateOutcome(before=current, after=saved, result=result)

        logger.warning("Giving up on %s after %d conflicting updates", license_key, self.max_attempts)
        raise ConcurrentUpdateError()
