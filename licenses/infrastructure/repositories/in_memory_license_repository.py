"""
In-memory implementation of LicenseRepository port.

Used by unit tests and the handler test-suite. It enforces the same
constraints as the database: unique keys, one live license per email,
and compare-and-swap updates on ``version``.
"""
import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from core.domain.exceptions import (
    ConcurrentUpdateError,
    DuplicateActiveLicenseError,
    KeyCollisionError,
    LicenseNotFoundError,
)
from core.domain.value_objects import LicenseStatus, LicenseType
from licenses.domain.license import License
from licenses.ports.license_repository import LicenseRepository


class InMemoryLicenseRepository(LicenseRepository):
    """Dict-backed license store."""

    def __init__(self):
        self._rows: Dict[str, License] = {}
        self._lock = asyncio.Lock()

    def _live_owner(self, email: str, exclude_key: Optional[str] = None) -> Optional[License]:
        for row in self._rows.values():
            if row.key != exclude_key and str(row.email) == email and row.is_live:
                return row
        return None

    async def add(self, license: License) -> License:
        async with self._lock:
            if license.key in self._rows:
                raise KeyCollisionError()
            if license.is_live and self._live_owner(str(license.email)):
                raise DuplicateActiveLicenseError()
            stored = replace(license, version=0)
            self._rows[license.key] = stored
            return stored

    async def save(self, license: License) -> License:
        async with self._lock:
            current = self._rows.get(license.key)
            if current is None:
                raise LicenseNotFoundError()
            if current.version != license.version:
                raise ConcurrentUpdateError()
            if license.is_live and self._live_owner(str(license.email), exclude_key=license.key):
                raise DuplicateActiveLicenseError()
            stored = replace(license, version=license.version + 1)
            self._rows[license.key] = stored
            return stored

    async def find_by_key(self, key: str) -> Optional[License]:
        return self._rows.get(key)

    async def find_by_email_and_key(self, email: str, key: str) -> Optional[License]:
        row = self._rows.get(key)
        if row and str(row.email) == email:
            return row
        return None

    async def find_live_by_email(self, email: str) -> Optional[License]:
        return self._live_owner(email)

    async def list(
        self,
        statuses: Optional[List[LicenseStatus]] = None,
        license_type: Optional[LicenseType] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[License], int]:
        rows = [
            row
            for row in self._rows.values()
            if (not statuses or row.status in statuses)
            and (not license_type or row.license_type == license_type)
        ]
        rows.sort(key=lambda row: row.created_at, reverse=True)
        return rows[offset : offset + limit], len(rows)

    async def find_expired_live(self, now: datetime) -> List[License]:
        return [row for row in self._rows.values() if row.is_live and row.expires_at < now]

    async def count_by_status(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for row in self._rows.values():
            counts[row.status.value] = counts.get(row.status.value, 0) + 1
        return counts
