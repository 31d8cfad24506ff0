"""
Integration tests for the Activity API endpoints.
"""

from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from activities.infrastructure.models import ActivityEvent
from licenses.infrastructure.models import License


def _log(api_client, action, **data):
    return api_client.post(
        reverse("activity:log"),
        {"email": "db-user@example.com", "action": action, "data": data, "version": "1.2"},
        format="json",
    )


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
class TestLogActivityAPI:
    """Integration tests for POST /api/v1/activity/log."""

    def test_log_activity(self, api_client, db_license):
        response = _log(api_client, "posting_completed", posted=12, failed=1)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Activity logged successfully"}
        event = ActivityEvent.objects.get(license_key=db_license.key)
        assert event.data == {"posted": 12, "failed": 1}
        assert event.metadata["client_version"] == "1.2"
        assert License.objects.get(key=db_license.key).last_checked is not None

    def test_log_without_live_license(self, api_client):
        response = api_client.post(
            reverse("activity:log"),
            {"email": "ghost@example.com", "action": "license_checked"},
            format="json",
        )

        assert response.status_code == 401
        assert response.json()["message"] == "No active license found"

    def test_log_unknown_action(self, api_client, db_license):
        response = _log(api_client, "teleported")
        assert response.status_code == 400


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
class TestActivityStatsAPI:
    """Integration tests for the statistics endpoints."""

    def test_user_stats(self, api_client, db_license):
        _log(api_client, "posting_completed", posted=10, failed=2)
        _log(api_client, "posting_completed", posted=20)
        _log(api_client, "settings_updated")

        response = api_client.get(
            reverse("activity:stats"), {"email": "db-user@example.com", "key": db_license.key}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["stats"]["general"]["totalActivities"] == 3
        assert {entry["action"] for entry in data["stats"]["general"]["activities"]} == {
            "posting_completed",
            "settings_updated",
        }
        assert data["stats"]["posting"] == {
            "totalSessions": 2,
            "totalThreadsPosted": 30,
            "totalThreadsFailed": 2,
            "avgThreadsPerSession": 15,
        }
        assert isinstance(data["stats"]["posting"]["totalThreadsPosted"], int)
        assert isinstance(data["stats"]["posting"]["totalThreadsFailed"], int)
        assert len(data["recentActivities"]) == 3
        assert set(data["recentActivities"][0]) == {"action", "data", "createdAt", "success", "errorMessage"}

    def test_user_stats_date_range(self, api_client, db_license):
        _log(api_client, "settings_updated")
        ActivityEvent.objects.update(created_at=timezone.now() - timedelta(days=10))
        _log(api_client, "settings_updated")

        response = api_client.get(
            reverse("activity:stats"),
            {
                "email": "db-user@example.com",
                "key": db_license.key,
                "startDate": (timezone.now() - timedelta(days=1)).isoformat(),
            },
        )

        assert response.json()["stats"]["general"]["totalActivities"] == 1

    def test_stats_reject_revoked_license(self, api_client, db_license):
        License.objects.filter(key=db_license.key).update(
            status="revoked", revoked=True, revoked_reason="fraud"
        )

        response = api_client.get(
            reverse("activity:stats"), {"email": "db-user@example.com", "key": db_license.key}
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_OR_EXPIRED_LICENSE"

    def test_summary(self, api_client, db_license):
        _log(api_client, "license_checked")
        _log(api_client, "license_checked")

        response = api_client.get(
            reverse("activity:summary"),
            {"email": "db-user@example.com", "key": db_license.key, "period": "24h"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "24h"
        [day] = data["summary"]
        assert day["totalActivities"] == 2
        assert day["activities"] == [{"action": "license_checked", "count": 2}]

    def test_summary_unknown_period_falls_back(self, api_client, db_license):
        response = api_client.get(
            reverse("activity:summary"),
            {"email": "db-user@example.com", "key": db_license.key, "period": "1y"},
        )

        assert response.status_code == 200
        assert response.json()["period"] == "7d"
