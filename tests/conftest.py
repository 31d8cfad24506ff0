"""
Pytest configuration and shared fixtures.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from activities.infrastructure.repositories.django_activity_repository import (
    DjangoActivityRepository,
)
from activities.infrastructure.repositories.in_memory_activity_repository import (
    InMemoryActivityRepository,
)
from core.domain.value_objects import LicenseType
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.in_memory_license_repository import (
    InMemoryLicenseRepository,
)
from tests.factories import NOW, make_license


@pytest.fixture
def now():
    """Fixed reference time."""
    return NOW


@pytest.fixture
def memory_license_repository():
    """Fixture for an in-memory LicenseRepository."""
    return InMemoryLicenseRepository()


@pytest.fixture
def memory_activity_repository():
    """Fixture for an in-memory ActivityRepository."""
    return InMemoryActivityRepository()


@pytest.fixture
def license_repository():
    """Fixture for the Django LicenseRepository."""
    return DjangoLicenseRepository()


@pytest.fixture
def activity_repository():
    """Fixture for the Django ActivityRepository."""
    return DjangoActivityRepository()


@pytest.fixture
def sample_license(now):
    """Fixture for a sample basic License entity issued at ``now``."""
    return make_license(now=now)


@pytest.fixture
def sample_pro_license(now):
    """Fixture for a sample pro License entity issued at ``now``."""
    return make_license(email="pro@example.com", license_type=LicenseType.PRO, now=now)


@pytest.fixture
def db_license(db, license_repository):
    """Fixture for a basic License saved in database, valid for 30 days from now."""

    async def save_license():
        license = make_license(email="db-user@example.com", now=datetime.now(timezone.utc))
        return await license_repository.add(license)

    return asyncio.run(save_license())


@pytest.fixture
def db_expired_license(db, license_repository):
    """Fixture for an active License saved in database whose expiry has passed."""

    async def save_license():
        license = make_license(
            email="lapsed@example.com",
            now=datetime.now(timezone.utc) - timedelta(days=40),
        )
        return await license_repository.add(license)

    return asyncio.run(save_license())


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_client(settings):
    """Fixture for DRF API client carrying the admin API key."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.credentials(HTTP_X_API_KEY=settings.ADMIN_API_KEY)
    return client


@pytest.fixture
def published_events(monkeypatch):
    """Capture domain events published on the global event bus."""
    from core.infrastructure.events import event_bus

    events = []

    async def publish(event):
        events.append(event)

    monkeypatch.setattr(event_bus, "publish", publish)
    return events
