"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
Updates are conditional on the version the entity was loaded with.
"""
import logging
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Count, F

from core.domain.exceptions import (
    ConcurrentUpdateError,
    DuplicateActiveLicenseError,
    KeyCollisionError,
    LicenseNotFoundError,
)
from core.domain.value_objects import Email, FeatureSet, LicenseStatus, LicenseType
from licenses.domain.license import License, LicenseMetadata, Revocation
from licenses.infrastructure.models import LIVE_STATUSES
from licenses.infrastructure.models import License as LicenseModel
from licenses.ports.license_repository import LicenseRepository

logger = logging.getLogger(__name__)

_METADATA_FIELDS = [f.name for f in dataclass_fields(LicenseMetadata)]


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to column values
    3. Maps integrity violations to domain errors
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        metadata = model.metadata or {}
        return License(
            id=model.id,
            key=model.key,
            email=Email(model.email),
            status=LicenseStatus(model.status),
            license_type=LicenseType(model.license_type),
            features=FeatureSet.from_dict(model.features),
            activated_at=model.activated_at,
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_checked=model.last_checked,
            check_count=model.check_count,
            metadata=LicenseMetadata(**{name: metadata.get(name) for name in _METADATA_FIELDS}),
            revoked=Revocation(
                status=model.revoked,
                reason=model.revoked_reason,
                date=model.revoked_at,
            ),
            version=model.version,
        )

    def _to_fields(self, license: License) -> Dict:
        """
        Convert the mutable part of a domain entity to column values.

        Args:
            license: License domain entity

        Returns:
            Dict of model field values
        """
        return {
            "email": str(license.email),
            "status": license.status.value,
            "license_type": license.license_type.value,
            "features": license.features.to_dict(),
            "activated_at": license.activated_at,
            "expires_at": license.expires_at,
            "last_checked": license.last_checked,
            "check_count": license.check_count,
            "metadata": {
                name: getattr(license.metadata, name)
                for name in _METADATA_FIELDS
                if getattr(license.metadata, name) is not None
            },
            "revoked": license.revoked.status,
            "revoked_reason": license.revoked.reason,
            "revoked_at": license.revoked.date,
            "updated_at": license.updated_at,
        }

    @sync_to_async
    def add(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Stored license entity
        """
        try:
            with transaction.atomic():
                # pylint: disable=no-member
                model = LicenseModel.objects.create(
                    id=license.id,
                    key=license.key,
                    created_at=license.created_at,
                    version=0,
                    **self._to_fields(license),
                )
        except IntegrityError as e:
            # pylint: disable=no-member
            if LicenseModel.objects.filter(key=license.key).exists():
                raise KeyCollisionError() from e
            logger.info("Live license conflict on insert for %s", license.email)
            raise DuplicateActiveLicenseError() from e
        return self._to_domain(model)

    @sync_to_async
    def save(self, license: License) -> License:
        """
        Compare-and-swap update of a license.

        Args:
            license: License entity carrying the version it was loaded with

        Returns:
            License entity with the bumped version
        """
        try:
            with transaction.atomic():
                # pylint: disable=no-member
                updated = LicenseModel.objects.filter(
                    id=license.id, version=license.version
                ).update(version=F("version") + 1, **self._to_fields(license))
        except IntegrityError as e:
            raise DuplicateActiveLicenseError() from e

        if not updated:
            # pylint: disable=no-member
            if not LicenseModel.objects.filter(id=license.id).exists():
                raise LicenseNotFoundError()
            raise ConcurrentUpdateError()
        return replace(license, version=license.version + 1)

    @sync_to_async
    def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by key.

        Args:
            key: License key

        Returns:
            License entity or None if not found
        """
        # pylint: disable=no-member
        model = LicenseModel.objects.filter(key=key).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_by_email_and_key(self, email: str, key: str) -> Optional[License]:
        """
        Find a license by email and key.

        Args:
            email: Normalized owner email
            key: License key

        Returns:
            License entity or None if not found
        """
        # pylint: disable=no-member
        model = LicenseModel.objects.filter(email=email, key=key).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_live_by_email(self, email: str) -> Optional[License]:
        """
        Find the live license for an email.

        Args:
            email: Normalized owner email

        Returns:
            License entity or None
        """
        # pylint: disable=no-member
        model = LicenseModel.objects.filter(email=email, status__in=LIVE_STATUSES).first()
        return self._to_domain(model) if model else None

    @sync_to_async
    def list(
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
            offset: Rows to skip
            limit: Page size

        Returns:
            Tuple of (licenses, total)
        """
        # pylint: disable=no-member
        queryset = LicenseModel.objects.all()
        if statuses:
            queryset = queryset.filter(status__in=[s.value for s in statuses])
        if license_type:
            queryset = queryset.filter(license_type=license_type.value)

        total = queryset.count()
        page = queryset.order_by("-created_at")[offset : offset + limit]
        return [self._to_domain(model) for model in page], total

    @sync_to_async
    def find_expired_live(self, now: datetime) -> List[License]:
        """Live licenses past their expiry."""
        # pylint: disable=no-member
        queryset = LicenseModel.objects.filter(status__in=LIVE_STATUSES, expires_at__lt=now)
        return [self._to_domain(model) for model in queryset]

    @sync_to_async
    def count_by_status(self) -> Dict[str, int]:
        """Number of licenses per status."""
        # pylint: disable=no-member
        rows = LicenseModel.objects.order_by().values("status").annotate(count=Count("id"))
        return {row["status"]: row["count"] for row in rows}
