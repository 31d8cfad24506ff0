"""
License domain events.

Domain events represent something that happened in the license domain.
The aggregate id of every license event is the license key.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.events import DomainEvent


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LicenseIssued(DomainEvent):
    """Event raised when a license is issued."""

    def __init__(
        self,
        license_key: str,
        email: str,
        license_type: str,
        expires_at: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseIssued event.

        Args:
            license_key: The issued key
            email: Owner email
            license_type: License type value
            expires_at: Expiry of the new license
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=license_key,
            event_type="LicenseIssued",
        )
        self.license_key = license_key
        self.email = email
        self.license_type = license_type
        self.expires_at = expires_at


class LicenseRevoked(DomainEvent):
    """Event raised when a license is revoked."""

    def __init__(
        self,
        license_key: str,
        reason: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=license_key,
            event_type="LicenseRevoked",
        )
        self.license_key = license_key
        self.reason = reason


class LicenseReactivated(DomainEvent):
    """Event raised when a revoked license is reactivated."""

    def __init__(self, license_key: str, occurred_at: Optional[datetime] = None):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=license_key,
            event_type="LicenseReactivated",
        )
        self.license_key = license_key


class LicenseExtended(DomainEvent):
    """Event raised when a license expiry is pushed forward."""

    def __init__(
        self,
        license_key: str,
        days: int,
        new_expiration: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=license_key,
            event_type="LicenseExtended",
        )
        self.license_key = license_key
        self.days = days
        self.new_expiration = new_expiration


class LicenseExpired(DomainEvent):
    """Event raised when a live license is found past its expiry."""

    def __init__(self, license_key: str, occurred_at: Optional[datetime] = None):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or _now(),
            aggregate_id=license_key,
            event_type="LicenseExpired",
        )
        self.license_key = license_key
