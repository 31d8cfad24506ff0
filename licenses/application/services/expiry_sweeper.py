"""
Expiry sweep.

Marks every live license past its expiry as expired. Shared by the
management command and the Celery task.
"""
import logging
from datetime import datetime
from typing import List, Optional

from core.domain.exceptions import ConcurrentUpdateError, LicenseNotFoundError
from core.infrastructure.events import event_bus
from licenses.application.services.license_updater import LicenseUpdater
from licenses.domain.events import LicenseExpired
from licenses.domain.license import utcnow
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Applies mark_expired to overdue live licenses."""

    def __init__(self, license_repository: LicenseRepository, updater: Optional[LicenseUpdater] = None):
        self.license_repository = license_repository
        self.updater = updater or LicenseUpdater(license_repository)

    async def find_overdue(self, now: Optional[datetime] = None) -> List[str]:
        """Keys of live licenses past their expiry."""
        now = now or utcnow()
        overdue = await self.license_repository.find_expired_live(now)
        return [license.key for license in overdue]

    async def sweep(self, now: Optional[datetime] = None) -> List[str]:
        """
        Expire every overdue live license.

        A license that changes under the sweep is skipped and picked
        up again on the next run.

        Args:
            now: Sweep time (defaults to utcnow)

        Returns:
            Keys that were moved to expired
        """
        now = now or utcnow()
        expired = []
        for key in await self.find_overdue(now):
            try:
                outcome = await self.updater.update(key, lambda lic: (lic.mark_expired(now), None))
            except (ConcurrentUpdateError, LicenseNotFoundError) as e:
                logger.warning("Skipping %s during expiry sweep: %s", key, e.message)
                continue
            if outcome.changed:
                expired.append(key)
                await event_bus.publish(LicenseExpired(license_key=key, occurred_at=now))

        logger.info("Expiry sweep marked %d license(s) expired", len(expired))
        return expired
