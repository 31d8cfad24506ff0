"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from licenses.domain.license import License, ValidityResult


@dataclass
class LicenseDTO:
    """DTO for license information."""

    id: uuid.UUID
    key: str
    email: str
    status: str
    license_type: str
    features: dict
    activated_at: datetime
    expires_at: datetime
    last_checked: Optional[datetime]
    check_count: int
    revoked: bool
    revoked_reason: Optional[str]
    revoked_at: Optional[datetime]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, license: License) -> "LicenseDTO":
        return cls(
            id=license.id,
            key=license.key,
            email=str(license.email),
            status=license.status.value,
            license_type=license.license_type.value,
            features=license.features.to_dict(),
            activated_at=license.activated_at,
            expires_at=license.expires_at,
            last_checked=license.last_checked,
            check_count=license.check_count,
            revoked=license.revoked.status,
            revoked_reason=license.revoked.reason,
            revoked_at=license.revoked.date,
            notes=license.metadata.notes,
            created_at=license.created_at,
            updated_at=license.updated_at,
        )


@dataclass
class CheckResultDTO:
    """DTO for the outcome of a validity check."""

    license_key: str
    valid: bool
    reason: Optional[str]
    expires_at: Optional[datetime]
    features: Optional[dict]
    license_type: Optional[str]
    days_left: int

    @classmethod
    def from_result(cls, license: License, result: ValidityResult, now: datetime) -> "CheckResultDTO":
        return cls(
            license_key=license.key,
            valid=result.valid,
            reason=result.reason,
            expires_at=result.expires_at,
            features=result.features.to_dict() if result.features else None,
            license_type=result.license_type.value if result.license_type else None,
            days_left=license.days_left(now),
        )


@dataclass
class LicenseInfoDTO:
    """DTO for the read-only license info response."""

    email: str
    license_type: str
    status: str
    features: dict
    activated_at: datetime
    expires_at: datetime
    days_left: int
    is_valid: bool


@dataclass
class LicensePageDTO:
    """DTO for one page of licenses."""

    licenses: List[LicenseDTO]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0
