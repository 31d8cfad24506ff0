"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from core.domain.value_objects import LicenseStatus, LicenseType
from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.

    Updates are compare-and-swap on ``License.version``: ``save`` only
    succeeds if the stored version still equals the version that was
    loaded.
    """

    @abstractmethod
    async def add(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Stored license entity

        Raises:
            KeyCollisionError: If the key is already taken
            DuplicateActiveLicenseError: If the email already has a live license
        """
        pass

    @abstractmethod
    async def save(self, license: License) -> License:
        """
        Persist a mutated license.

        Args:
            license: License entity carrying the version it was loaded with

        Returns:
            Stored license entity with the bumped version

        Raises:
            ConcurrentUpdateError: If the stored version moved on
            DuplicateActiveLicenseError: If the update would create a second live license
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by key.

        Args:
            key: License key

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_email_and_key(self, email: str, key: str) -> Optional[License]:
        """
        Find a license by owner email and key.

        Args:
            email: Normalized owner email
            key: License key

        Returns:
            License entity or None if the pair does not match
        """
        pass

    @abstractmethod
    async def find_live_by_email(self, email: str) -> Optional[License]:
        """
        Find the live (active/trial) license for an email.

        Args:
            email: Normalized owner email

        Returns:
            License entity or None
        """
        pass

    @abstractmethod
    async def list(
        self,
        statuses: Optional[List[LicenseStatus]] = None,
        license_type: Optional[LicenseType] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[License], int]:
        """
        List licenses, newest first.

        Args:
            statuses: Optional status filter
            license_type: Optional type filter
            offset: Number of rows to skip
            limit: Page size

        Returns:
            Tuple of (page of licenses, total matching)
        """
        pass

    @abstractmethod
    async def find_expired_live(self, now: datetime) -> List[License]:
        """Live licenses whose expiry is before ``now``."""
        pass

    @abstractmethod
    async def count_by_status(self) -> Dict[str, int]:
        """Number of licenses per status value."""
        pass
