"""
Integration tests for health and readiness endpoints.
"""

import pytest
from django.urls import reverse

from core import views


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
class TestHealthEndpoints:
    """Tests for /health/, /health/db/, /health/cache/ and /ready/."""

    def test_liveness(self, api_client):
        response = api_client.get(reverse("health"))
        assert response.json() == {"status": "healthy", "service": "license-service"}

    def test_store_health_reports_each_store(self, api_client):
        response = api_client.get(reverse("health-db"))

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "checks": {"database": "ok", "license_store": "ok", "activity_store": "ok"},
        }

    def test_cache_health(self, api_client):
        response = api_client.get(reverse("health-cache"))
        assert response.json()["checks"] == {"cache": "ok"}

    def test_ready(self, api_client):
        response = api_client.get(reverse("ready"))

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert set(data["checks"]) == {"database", "license_store", "activity_store", "cache"}

    def test_failing_store_marks_not_ready(self, api_client, monkeypatch):
        def broken():
            raise RuntimeError("no such table: activity_events")

        monkeypatch.setitem(views.STORE_CHECKS, "activity_store", broken)

        response = api_client.get(reverse("ready"))

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert data["checks"]["activity_store"] == "failed"
        assert data["checks"]["license_store"] == "ok"
        assert data["errors"] == {"activity_store": "no such table: activity_events"}
