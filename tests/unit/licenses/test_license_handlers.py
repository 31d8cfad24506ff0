"""
Unit tests for license application handlers.

Handlers run against the in-memory repositories.
"""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from activities.application.services.activity_recorder import ActivityRecorder
from activities.domain.activity import UNKNOWN_LICENSE_KEY
from core.domain.exceptions import (
    DuplicateActiveLicenseError,
    InvalidCredentialsError,
    InvalidTransitionError,
    KeyCollisionError,
    LicenseNotFoundError,
)
from core.domain.value_objects import ActivityAction, ClientMetadata, LicenseStatus, LicenseType
from licenses.application.commands.check_license import CheckLicenseCommand, ValidateLicenseCommand
from licenses.application.commands.extend_license import ExtendLicenseCommand
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.commands.reactivate_license import ReactivateLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.handlers.check_license_handlers import (
    CheckLicenseHandler,
    GetLicenseInfoHandler,
    ValidateLicenseHandler,
)
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    ExtendLicenseHandler,
    ReactivateLicenseHandler,
    RevokeLicenseHandler,
)
from licenses.application.handlers.list_licenses_handler import ListLicensesHandler
from licenses.application.queries.get_license_info import GetLicenseInfoQuery
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.domain.events import LicenseExpired, LicenseIssued, LicenseRevoked
from licenses.domain.services import ExtensionMode, ExtensionPolicy
from tests.factories import make_license

CLIENT = ClientMetadata(ip="203.0.113.7", user_agent="extension/2.0", client_version="2.0.1")


class FixedKeyGenerator:
    """Returns keys from a list, in order."""

    def __init__(self, keys):
        self.keys = list(keys)

    def generate(self):
        return self.keys.pop(0)


def _utcnow():
    return datetime.now(timezone.utc)


async def _stored(repository, **kwargs):
    kwargs.setdefault("now", _utcnow())
    return await repository.add(make_license(**kwargs))


@pytest.fixture
def recorder(memory_activity_repository):
    return ActivityRecorder(memory_activity_repository)


@pytest.mark.asyncio
class TestIssueLicenseHandler:
    """Tests for IssueLicenseHandler."""

    async def test_issue_pro_license(self, memory_license_repository, published_events):
        """Test issuing a pro license with policy defaults."""
        handler = IssueLicenseHandler(memory_license_repository)

        license = await handler.handle(IssueLicenseCommand(email="Buyer@Example.com", license_type="pro"))

        assert str(license.email) == "buyer@example.com"
        assert license.status == LicenseStatus.ACTIVE
        assert license.features.max_threads == 500
        assert (license.expires_at - license.activated_at).days == 365
        assert await memory_license_repository.find_by_key(license.key) == license
        assert [type(e) for e in published_events] == [LicenseIssued]
        assert published_events[0].license_type == "pro"

    async def test_issue_trial_license(self, memory_license_repository, published_events):
        license = await IssueLicenseHandler(memory_license_repository).handle(
            IssueLicenseCommand(email="t@example.com", license_type="trial")
        )
        assert license.status == LicenseStatus.TRIAL
        assert (license.expires_at - license.activated_at).days == 7

    async def test_issue_with_days_overrides_and_notes(self, memory_license_repository, published_events):
        license = await IssueLicenseHandler(memory_license_repository).handle(
            IssueLicenseCommand(
                email="c@example.com",
                license_type="custom",
                days=90,
                feature_overrides={"maxThreads": 42},
                notes="reseller deal",
            )
        )
        assert (license.expires_at - license.activated_at).days == 90
        assert license.features.max_threads == 42
        assert license.metadata.notes == "reseller deal"

    async def test_duplicate_live_license(self, memory_license_repository, published_events):
        """Test an email can hold only one live license."""
        handler = IssueLicenseHandler(memory_license_repository)
        await handler.handle(IssueLicenseCommand(email="dup@example.com", license_type="basic"))

        with pytest.raises(DuplicateActiveLicenseError):
            await handler.handle(IssueLicenseCommand(email="dup@example.com", license_type="pro"))
        assert len(published_events) == 1

    async def test_issue_after_revocation(self, memory_license_repository, published_events):
        """Test a revoked license does not block a new one."""
        first = await _stored(memory_license_repository, email="again@example.com")
        await RevokeLicenseHandler(memory_license_repository).handle(
            RevokeLicenseCommand(license_key=first.key, reason="fraud")
        )

        second = await IssueLicenseHandler(memory_license_repository).handle(
            IssueLicenseCommand(email="again@example.com", license_type="basic")
        )
        assert second.key != first.key

    async def test_issue_after_expiry(self, memory_license_repository, published_events):
        """Test an expired license does not block a new one."""
        first = await _stored(
            memory_license_repository, email="a@b.com", now=_utcnow() - timedelta(days=40)
        )
        expired, _ = first.check_validity(_utcnow())
        await memory_license_repository.save(expired)

        second = await IssueLicenseHandler(memory_license_repository).handle(
            IssueLicenseCommand(email="a@b.com", license_type="pro")
        )

        assert second.status == LicenseStatus.ACTIVE
        assert (await memory_license_repository.find_by_key(first.key)).status == LicenseStatus.EXPIRED
        assert (await memory_license_repository.find_live_by_email("a@b.com")).key == second.key

    async def test_key_collision_retries(self, memory_license_repository, published_events):
        """Test a colliding key is regenerated."""
        existing = await _stored(memory_license_repository, email="other@example.com")
        generator = FixedKeyGenerator([existing.key, "AAAA-BBBB-CCCC-DDDD"])

        license = await IssueLicenseHandler(
            memory_license_repository, key_generator=generator
        ).handle(IssueLicenseCommand(email="new@example.com", license_type="basic"))

        assert license.key == "AAAA-BBBB-CCCC-DDDD"

    async def test_key_collision_gives_up(self, memory_license_repository, published_events):
        existing = await _stored(memory_license_repository, email="other@example.com")
        generator = FixedKeyGenerator([existing.key] * 3)

        with pytest.raises(KeyCollisionError):
            await IssueLicenseHandler(
                memory_license_repository, key_generator=generator, max_key_attempts=3
            ).handle(IssueLicenseCommand(email="new@example.com", license_type="basic"))
        assert published_events == []

    async def test_invalid_type(self, memory_license_repository):
        with pytest.raises(ValueError):
            await IssueLicenseHandler(memory_license_repository).handle(
                IssueLicenseCommand(email="x@example.com", license_type="platinum")
            )


@pytest.mark.asyncio
class TestValidityCheckHandlers:
    """Tests for ValidateLicenseHandler and CheckLicenseHandler."""

    async def test_validate_success(
        self, memory_license_repository, memory_activity_repository, recorder, published_events
    ):
        """Test activation touches client details and records the activity."""
        stored = await _stored(memory_license_repository, license_type=LicenseType.PRO)
        handler = ValidateLicenseHandler(memory_license_repository, recorder)

        result = await handler.handle(ValidateLicenseCommand("USER@example.com", stored.key, CLIENT))

        assert result.valid is True
        assert result.features["max_threads"] == 500
        assert result.license_type == "pro"
        updated = await memory_license_repository.find_by_key(stored.key)
        assert updated.check_count == 1
        assert updated.metadata.ip == "203.0.113.7"
        assert updated.metadata.client_version == "2.0.1"
        [event] = memory_activity_repository.events
        assert event.action == ActivityAction.LICENSE_ACTIVATED
        assert event.success is True
        assert event.license_key == stored.key

    async def test_wrong_key(self, memory_license_repository, memory_activity_repository, recorder):
        """Test a mismatched pair raises and records an unknown-key failure."""
        await _stored(memory_license_repository)
        handler = ValidateLicenseHandler(memory_license_repository, recorder)

        with pytest.raises(InvalidCredentialsError, match="Invalid email or license key"):
            await handler.handle(ValidateLicenseCommand("user@example.com", "ZZZZ-ZZZZ-ZZZZ-ZZZZ", CLIENT))

        [event] = memory_activity_repository.events
        assert event.license_key == UNKNOWN_LICENSE_KEY
        assert event.success is False

    async def test_wrong_email(self, memory_license_repository, recorder):
        stored = await _stored(memory_license_repository)
        with pytest.raises(InvalidCredentialsError):
            await CheckLicenseHandler(memory_license_repository, recorder).handle(
                CheckLicenseCommand("someone@example.com", stored.key, CLIENT)
            )

    async def test_check_expired_license(
        self, memory_license_repository, memory_activity_repository, recorder, published_events
    ):
        """Test a lapsed license is persisted as expired and an event is published."""
        stored = await _stored(memory_license_repository, now=_utcnow() - timedelta(days=31))

        result = await CheckLicenseHandler(memory_license_repository, recorder).handle(
            CheckLicenseCommand("user@example.com", stored.key, CLIENT)
        )

        assert result.valid is False
        assert result.reason == "License expired"
        assert result.days_left == 0
        updated = await memory_license_repository.find_by_key(stored.key)
        assert updated.status == LicenseStatus.EXPIRED
        assert [type(e) for e in published_events] == [LicenseExpired]
        [event] = memory_activity_repository.events
        assert event.action == ActivityAction.LICENSE_CHECKED
        assert event.success is False
        assert event.error_message == "License expired"

    async def test_check_expired_twice_publishes_once(
        self, memory_license_repository, recorder, published_events
    ):
        stored = await _stored(memory_license_repository, now=_utcnow() - timedelta(days=31))
        handler = CheckLicenseHandler(memory_license_repository, recorder)
        for _ in range(2):
            await handler.handle(CheckLicenseCommand("user@example.com", stored.key, CLIENT))

        assert len(published_events) == 1
        assert (await memory_license_repository.find_by_key(stored.key)).check_count == 2

    async def test_invalid_validate_does_not_touch(self, memory_license_repository, recorder, published_events):
        """Test client details are not stored when the license is not valid."""
        stored = await _stored(memory_license_repository)
        await RevokeLicenseHandler(memory_license_repository).handle(
            RevokeLicenseCommand(license_key=stored.key, reason="fraud")
        )

        result = await ValidateLicenseHandler(memory_license_repository, recorder).handle(
            ValidateLicenseCommand("user@example.com", stored.key, CLIENT)
        )

        assert result.reason == "License revoked: fraud"
        updated = await memory_license_repository.find_by_key(stored.key)
        assert updated.metadata.ip is None
        assert updated.check_count == 1

    async def test_activity_failure_does_not_fail_check(self, memory_license_repository):
        """Test a broken activity log never fails the check."""
        from activities.infrastructure.repositories.in_memory_activity_repository import (
            InMemoryActivityRepository,
        )

        stored = await _stored(memory_license_repository)
        recorder = ActivityRecorder(InMemoryActivityRepository(fail_with=RuntimeError("db down")))

        result = await CheckLicenseHandler(memory_license_repository, recorder).handle(
            CheckLicenseCommand("user@example.com", stored.key, CLIENT)
        )

        assert result.valid is True
        assert (await memory_license_repository.find_by_key(stored.key)).check_count == 1

    async def test_concurrent_checks_keep_every_increment(self, recorder):
        """Test interleaved checks on one license never lose a counter update."""
        from licenses.infrastructure.repositories.in_memory_license_repository import (
            InMemoryLicenseRepository,
        )

        class InterleavingRepository(InMemoryLicenseRepository):
            async def find_by_key(self, key):
                found = await super().find_by_key(key)
                await asyncio.sleep(0)
                return found

        repository = InterleavingRepository()
        stored = await _stored(repository)
        handler = CheckLicenseHandler(repository, recorder)

        await asyncio.gather(
            *(handler.handle(CheckLicenseCommand("user@example.com", stored.key, CLIENT)) for _ in range(3))
        )

        assert (await repository.find_by_key(stored.key)).check_count == 3


@pytest.mark.asyncio
class TestGetLicenseInfoHandler:
    """Tests for GetLicenseInfoHandler."""

    async def test_info(self, memory_license_repository):
        stored = await _stored(memory_license_repository, now=_utcnow() - timedelta(hours=1))

        info = await GetLicenseInfoHandler(memory_license_repository).handle(
            GetLicenseInfoQuery(email="user@example.com", license_key=stored.key)
        )

        assert info.is_valid is True
        assert info.days_left == 29
        assert info.license_type == "basic"

    async def test_info_is_read_only(self, memory_license_repository):
        stored = await _stored(memory_license_repository)
        await GetLicenseInfoHandler(memory_license_repository).handle(
            GetLicenseInfoQuery(email="user@example.com", license_key=stored.key)
        )
        assert await memory_license_repository.find_by_key(stored.key) == stored

    async def test_info_not_found(self, memory_license_repository):
        with pytest.raises(LicenseNotFoundError):
            await GetLicenseInfoHandler(memory_license_repository).handle(
                GetLicenseInfoQuery(email="nobody@example.com", license_key="AAAA-AAAA-AAAA-AAAA")
            )


@pytest.mark.asyncio
class TestLifecycleHandlers:
    """Tests for revoke, reactivate and extend handlers."""

    async def test_revoke_publishes_once(self, memory_license_repository, published_events):
        stored = await _stored(memory_license_repository)
        handler = RevokeLicenseHandler(memory_license_repository)

        first = await handler.handle(RevokeLicenseCommand(license_key=stored.key, reason="fraud"))
        second = await handler.handle(RevokeLicenseCommand(license_key=stored.key, reason="again"))

        assert first.revoked.reason == "fraud"
        assert second.revoked.reason == "fraud"
        assert [type(e) for e in published_events] == [LicenseRevoked]

    async def test_revoke_unknown_key(self, memory_license_repository):
        with pytest.raises(LicenseNotFoundError):
            await RevokeLicenseHandler(memory_license_repository).handle(
                RevokeLicenseCommand(license_key="AAAA-AAAA-AAAA-AAAA", reason="x")
            )

    async def test_end_to_end_revoke_reactivate(
        self, memory_license_repository, recorder, published_events
    ):
        """Test pro issue, validate, revoke for fraud, reactivate, check valid again."""
        license = await IssueLicenseHandler(memory_license_repository).handle(
            IssueLicenseCommand(email="u@x.com", license_type="pro")
        )
        validated = await ValidateLicenseHandler(memory_license_repository, recorder).handle(
            ValidateLicenseCommand("u@x.com", license.key, CLIENT)
        )
        assert validated.features["max_threads"] == 500

        await RevokeLicenseHandler(memory_license_repository).handle(
            RevokeLicenseCommand(license_key=license.key, reason="fraud")
        )
        check = CheckLicenseHandler(memory_license_repository, recorder)
        revoked = await check.handle(CheckLicenseCommand("u@x.com", license.key, CLIENT))
        assert revoked.valid is False
        assert revoked.reason == "License revoked: fraud"

        await ReactivateLicenseHandler(memory_license_repository).handle(
            ReactivateLicenseCommand(license_key=license.key)
        )
        again = await check.handle(CheckLicenseCommand("u@x.com", license.key, CLIENT))
        assert again.valid is True

    async def test_reactivate_active_license(self, memory_license_repository, published_events):
        stored = await _stored(memory_license_repository)
        with pytest.raises(InvalidTransitionError):
            await ReactivateLicenseHandler(memory_license_repository).handle(
                ReactivateLicenseCommand(license_key=stored.key)
            )

    async def test_reactivate_blocked_by_newer_live_license(
        self, memory_license_repository, published_events
    ):
        """Test reactivation cannot create a second live license for an email."""
        old = await _stored(memory_license_repository, email="twice@example.com")
        await RevokeLicenseHandler(memory_license_repository).handle(
            RevokeLicenseCommand(license_key=old.key, reason="moved")
        )
        await _stored(memory_license_repository, email="twice@example.com")

        with pytest.raises(DuplicateActiveLicenseError):
            await ReactivateLicenseHandler(memory_license_repository).handle(
                ReactivateLicenseCommand(license_key=old.key)
            )

    async def test_extend_expired_license(self, memory_license_repository, published_events):
        """Test extending a lapsed license revives it."""
        stored = await _stored(memory_license_repository, now=_utcnow() - timedelta(days=40))
        expired = await memory_license_repository.save(replace(stored, status=LicenseStatus.EXPIRED))

        extended = await ExtendLicenseHandler(memory_license_repository).handle(
            ExtendLicenseCommand(license_key=expired.key, days=30)
        )

        assert extended.status == LicenseStatus.ACTIVE
        assert extended.expires_at > _utcnow() + timedelta(days=29)

    async def test_extend_refused_by_policy(self, memory_license_repository, published_events):
        stored = await _stored(memory_license_repository)
        handler = ExtendLicenseHandler(
            memory_license_repository, policy=ExtensionPolicy(ExtensionMode.NEAR_EXPIRY, 7)
        )
        with pytest.raises(InvalidTransitionError):
            await handler.handle(ExtendLicenseCommand(license_key=stored.key, days=30))
        assert published_events == []


@pytest.mark.asyncio
class TestListLicensesHandler:
    """Tests for ListLicensesHandler."""

    async def test_filters_and_pages(self, memory_license_repository, published_events):
        for index in range(5):
            await _stored(
                memory_license_repository,
                email=f"user{index}@example.com",
                now=_utcnow() + timedelta(seconds=index),
            )
        revoked = await _stored(memory_license_repository, email="gone@example.com")
        await RevokeLicenseHandler(memory_license_repository).handle(
            RevokeLicenseCommand(license_key=revoked.key, reason="x")
        )
        handler = ListLicensesHandler(memory_license_repository)

        page = await handler.handle(ListLicensesQuery(statuses=["active", "trial"], page=2, limit=2))
        assert page.total == 5
        assert page.pages == 3
        assert [dto.email for dto in page.licenses] == ["user2@example.com", "user1@example.com"]

        revoked_page = await handler.handle(ListLicensesQuery(statuses=["revoked"]))
        assert [dto.key for dto in revoked_page.licenses] == [revoked.key]

    async def test_limit_is_capped(self, memory_license_repository):
        page = await ListLicensesHandler(memory_license_repository).handle(
            ListLicensesQuery(page=0, limit=1000)
        )
        assert page.page == 1
        assert page.limit == 100
        assert page.pages == 0
