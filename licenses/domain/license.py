"""
License domain entity.

This is the core domain entity representing a license and its
lifecycle state machine. Every transition is a pure function of the
current record and ``now``: it returns a new record and never touches
storage. Callers load, transition, then persist.
"""
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from core.domain.exceptions import InvalidTransitionError
from core.domain.value_objects import (
    ClientMetadata,
    Email,
    FeatureSet,
    LicenseStatus,
    LicenseType,
)
from licenses.domain.license_key import validate_key_format

DEFAULT_REVOKE_REASON = "Revoked by admin"


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Revocation:
    """Revocation details of a license."""

    status: bool = False
    reason: Optional[str] = None
    date: Optional[datetime] = None


@dataclass(frozen=True)
class LicenseMetadata:
    """Advisory, free-form details. Never affects validity."""

    notes: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    client_version: Optional[str] = None


@dataclass(frozen=True)
class ValidityResult:
    """Outcome of a validity check."""

    valid: bool
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    features: Optional[FeatureSet] = None
    license_type: Optional[LicenseType] = None

    @classmethod
    def ok(cls, license: "License") -> "ValidityResult":
        return cls(
            valid=True,
            expires_at=license.expires_at,
            features=license.features,
            license_type=license.license_type,
        )

    @classmethod
    def invalid(cls, reason: str) -> "ValidityResult":
        return cls(valid=False, reason=reason)


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    Represents a time-limited license owned by an email address.
    This is an immutable value object; lifecycle methods return new
    instances. ``version`` is the optimistic concurrency token managed
    by the repository.
    """

    id: uuid.UUID
    key: str
    email: Email
    status: LicenseStatus
    license_type: LicenseType
    features: FeatureSet
    activated_at: datetime
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    last_checked: Optional[datetime] = None
    check_count: int = 0
    metadata: LicenseMetadata = field(default_factory=LicenseMetadata)
    revoked: Revocation = field(default_factory=Revocation)
    version: int = 0

    def __post_init__(self):
        """Validate license entity."""
        if not validate_key_format(self.key):
            raise ValueError(f"Invalid license key format: {self.key}")
        if not isinstance(self.email, Email):
            object.__setattr__(self, "email", Email(self.email))
        if self.check_count < 0:
            raise ValueError("check_count cannot be negative")

    @classmethod
    def create(
        cls,
        key: str,
        email: str,
        license_type: LicenseType,
        features: FeatureSet,
        duration_days: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
        license_id: Optional[uuid.UUID] = None,
    ) -> "License":
        """
        Issue a new License.

        Trial licenses start in ``trial`` status, everything else in ``active``.

        Args:
            key: Pre-generated license key
            email: Owner email address
            license_type: License type
            features: Resolved feature set
            duration_days: Days until expiry
            notes: Optional operator notes
            now: Issue time (defaults to utcnow)
            license_id: Optional UUID (generated if not provided)

        Returns:
            License entity instance
        """
        if duration_days <= 0:
            raise ValueError("duration_days must be positive")
        now = now or utcnow()
        status = LicenseStatus.TRIAL if license_type is LicenseType.TRIAL else LicenseStatus.ACTIVE
        return cls(
            id=license_id or uuid.uuid4(),
            key=key,
            email=Email(email),
            status=status,
            license_type=license_type,
            features=features,
            activated_at=now,
            expires_at=now + timedelta(days=duration_days),
            created_at=now,
            updated_at=now,
            metadata=LicenseMetadata(notes=notes),
        )

    @property
    def is_live(self) -> bool:
        return self.status.is_live

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """
        Check the validity predicate against the current field values.

        Args:
            now: Current time (defaults to utcnow)

        Returns:
            True if not revoked, live, and not past expiry
        """
        now = now or utcnow()
        return not self.revoked.status and self.is_live and now <= self.expires_at

    def check_validity(self, now: Optional[datetime] = None) -> Tuple["License", ValidityResult]:
        """
        Run a validity check.

        Counters are bumped on every call. Expiry is checked before
        revocation: any license past its expiry moves to ``expired`` and
        reports "License expired", even when it was revoked. The
        revocation details are kept, so it still needs reactivating.

        Args:
            now: Current time (defaults to utcnow)

        Returns:
            Tuple of (updated license, validity result)
        """
        now = now or utcnow()
        checked = replace(
            self,
            last_checked=now,
            check_count=self.check_count + 1,
            updated_at=now,
        )

        if now > checked.expires_at:
            checked = replace(checked, status=LicenseStatus.EXPIRED)
            return checked, ValidityResult.invalid("License expired")

        if checked.revoked.status:
            return checked, ValidityResult.invalid(f"License revoked: {checked.revoked.reason}")

        if not checked.is_live:
            return checked, ValidityResult.invalid(f"License status: {checked.status.value}")

        return checked, ValidityResult.ok(checked)

    def mark_expired(self, now: Optional[datetime] = None) -> "License":
        """
        Move a live license past its expiry into ``expired``.

        Anything else is returned unchanged.
        """
        now = now or utcnow()
        if not self.is_live or now <= self.expires_at:
            return self
        return replace(self, status=LicenseStatus.EXPIRED, updated_at=now)

    def revoke(self, reason: Optional[str] = None, now: Optional[datetime] = None) -> "License":
        """
        Revoke the license.

        Revoking an already revoked license keeps the original details,
        including a revoked license that has since expired.

        Args:
            reason: Why the license was revoked
            now: Revocation time (defaults to utcnow)

        Returns:
            New License instance with revoked status
        """
        if self.revoked.status:
            return self
        now = now or utcnow()
        return replace(
            self,
            status=LicenseStatus.REVOKED,
            revoked=Revocation(status=True, reason=reason or DEFAULT_REVOKE_REASON, date=now),
            updated_at=now,
        )

    def reactivate(self, now: Optional[datetime] = None) -> "License":
        """
        Bring a revoked license back to ``active``.

        ``expires_at`` is left alone; a lapsed license must also be extended.

        Raises:
            InvalidTransitionError: If the license is not revoked
        """
        if not self.revoked.status:
            raise InvalidTransitionError(
                f"Only revoked licenses can be reactivated (status: {self.status.value})"
            )
        now = now or utcnow()
        return replace(
            self,
            status=LicenseStatus.ACTIVE,
            revoked=Revocation(),
            updated_at=now,
        )

    def extend(self, days: int, now: Optional[datetime] = None) -> "License":
        """
        Push the expiry forward by ``days``.

        The new expiry counts from whichever is later of the current
        expiry or now. An expired license becomes active again, unless it
        was revoked before it lapsed: that one goes back to ``revoked``.

        Args:
            days: Number of days to add
            now: Current time (defaults to utcnow)

        Returns:
            New License instance with the new expiry

        Raises:
            InvalidTransitionError: If days is not positive
        """
        if days <= 0:
            raise InvalidTransitionError("Extension days must be positive")
        now = now or utcnow()
        base = max(self.expires_at, now)
        status = self.status
        if status == LicenseStatus.EXPIRED:
            status = LicenseStatus.REVOKED if self.revoked.status else LicenseStatus.ACTIVE
        return replace(
            self,
            expires_at=base + timedelta(days=days),
            status=status,
            updated_at=now,
        )

    def touch(self, client: ClientMetadata, now: Optional[datetime] = None) -> "License":
        """Record the last-seen client details. Missing values keep the old ones."""
        now = now or utcnow()
        metadata = replace(
            self.metadata,
            ip=client.ip or self.metadata.ip,
            user_agent=client.user_agent or self.metadata.user_agent,
            client_version=client.client_version or self.metadata.client_version,
        )
        return replace(self, metadata=metadata, updated_at=now)

    def mark_seen(self, now: Optional[datetime] = None) -> "License":
        """Set ``last_checked`` without counting a validity check."""
        now = now or utcnow()
        return replace(self, last_checked=now, updated_at=now)

    def days_left(self, now: Optional[datetime] = None) -> int:
        """Days until expiry, rounded up, never negative."""
        now = now or utcnow()
        seconds = (self.expires_at - now).total_seconds()
        return max(0, math.ceil(seconds / 86400))

    def whole_days_left(self, now: Optional[datetime] = None) -> int:
        """Full days until expiry, rounded down, never negative."""
        now = now or utcnow()
        seconds = (self.expires_at - now).total_seconds()
        return max(0, math.floor(seconds / 86400))
