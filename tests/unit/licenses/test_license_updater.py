"""
Unit tests for LicenseUpdater and ExpirySweeper.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.domain.exceptions import ConcurrentUpdateError, LicenseNotFoundError
from core.domain.value_objects import LicenseStatus
from licenses.application.services.expiry_sweeper import ExpirySweeper
from licenses.application.services.license_updater import LicenseUpdater
from licenses.domain.events import LicenseExpired
from licenses.infrastructure.repositories.in_memory_license_repository import (
    InMemoryLicenseRepository,
)
from tests.factories import make_license


class ConflictingRepository(InMemoryLicenseRepository):
    """Bumps the stored version behind the caller's back ``conflicts`` times."""

    def __init__(self, conflicts):
        super().__init__()
        self.conflicts = conflicts
        self.saves = 0

    async def save(self, license):
        self.saves += 1
        if self.conflicts:
            self.conflicts -= 1
            current = self._rows[license.key]
            await super().save(current.mark_seen(datetime.now(timezone.utc)))
        return await super().save(license)


@pytest.mark.asyncio
class TestLicenseUpdater:
    """Tests for LicenseUpdater."""

    async def test_update_persists_and_bumps_version(self, memory_license_repository, sample_license, now):
        stored = await memory_license_repository.add(sample_license)

        outcome = await LicenseUpdater(memory_license_repository).update(
            stored.key, lambda current: current.check_validity(now)
        )

        assert outcome.changed
        assert outcome.result.valid is True
        assert outcome.after.version == stored.version + 1
        assert outcome.after.check_count == 1

    async def test_unchanged_transition_skips_save(self, memory_license_repository, sample_license, now):
        stored = await memory_license_repository.add(sample_license)

        outcome = await LicenseUpdater(memory_license_repository).update(
            stored.key, lambda current: (current.mark_expired(now), "noop")
        )

        assert not outcome.changed
        assert outcome.result == "noop"
        assert (await memory_license_repository.find_by_key(stored.key)).version == stored.version

    async def test_retries_on_conflict(self, sample_license, now):
        """Test a lost race reloads and recomputes on the fresh state."""
        repository = ConflictingRepository(conflicts=2)
        stored = await repository.add(sample_license)
        calls = []

        def transition(current):
            calls.append(current.version)
            return current.check_validity(now)

        outcome = await LicenseUpdater(repository, max_attempts=5).update(stored.key, transition)

        assert calls == [0, 1, 2]
        assert outcome.after.check_count == 1
        assert outcome.after.version == 3

    async def test_gives_up_after_max_attempts(self, sample_license, now):
        repository = ConflictingRepository(conflicts=10)
        stored = await repository.add(sample_license)

        with pytest.raises(ConcurrentUpdateError):
            await LicenseUpdater(repository, max_attempts=3).update(
                stored.key, lambda current: current.check_validity(now)
            )
        assert repository.saves == 3

    async def test_unknown_key(self, memory_license_repository):
        with pytest.raises(LicenseNotFoundError):
            await LicenseUpdater(memory_license_repository).update(
                "AAAA-AAAA-AAAA-AAAA", lambda current: (current, None)
            )


@pytest.mark.asyncio
class TestExpirySweeper:
    """Tests for ExpirySweeper."""

    async def test_sweep_marks_overdue_live_licenses(self, memory_license_repository, now, published_events):
        overdue = await memory_license_repository.add(
            make_license(email="old@example.com", now=now - timedelta(days=31))
        )
        current = await memory_license_repository.add(make_license(email="new@example.com", now=now))
        revoked = make_license(email="gone@example.com", now=now - timedelta(days=60)).revoke("x", now)
        await memory_license_repository.add(revoked)

        sweeper = ExpirySweeper(memory_license_repository)
        assert await sweeper.find_overdue(now) == [overdue.key]

        expired = await sweeper.sweep(now)

        assert expired == [overdue.key]
        assert (await memory_license_repository.find_by_key(overdue.key)).status == LicenseStatus.EXPIRED
        assert (await memory_license_repository.find_by_key(current.key)).status == LicenseStatus.ACTIVE
        assert (await memory_license_repository.find_by_key(revoked.key)).status == LicenseStatus.REVOKED
        assert [e.license_key for e in published_events if isinstance(e, LicenseExpired)] == [overdue.key]

    async def test_sweep_is_idempotent(self, memory_license_repository, now, published_events):
        await memory_license_repository.add(make_license(now=now - timedelta(days=31)))
        sweeper = ExpirySweeper(memory_license_repository)

        assert len(await sweeper.sweep(now)) == 1
        assert await sweeper.sweep(now) == []
        assert len(published_events) == 1

    async def test_sweep_skips_contended_license(self, now, published_events):
        repository = ConflictingRepository(conflicts=10)
        await repository.add(make_license(now=now - timedelta(days=31)))

        sweeper = ExpirySweeper(repository, LicenseUpdater(repository, max_attempts=2))

        assert await sweeper.sweep(now) == []
        assert published_events == []
