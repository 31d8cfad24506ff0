"""
Unit tests for request middleware.
"""

import json

import pytest
from django.core.cache import cache
from django.http import HttpResponse
from django.test import RequestFactory

from core.middleware.auth import AdminAPIKeyMiddleware
from core.middleware.metrics import normalize_endpoint
from core.middleware.observability import ObservabilityMiddleware
from core.middleware.rate_limit import RateLimitMiddleware


def _ok(request):
    return HttpResponse("ok")


@pytest.fixture
def rf():
    return RequestFactory()


class TestAdminAPIKeyMiddleware:
    """Tests for AdminAPIKeyMiddleware."""

    def test_ignores_other_paths(self, rf):
        response = AdminAPIKeyMiddleware(_ok)(rf.get("/api/v1/license/info"))
        assert response.status_code == 200

    @pytest.mark.parametrize("header", [None, "", "wrong-key"])
    def test_rejects_missing_or_wrong_key(self, rf, settings, header):
        settings.ADMIN_API_KEY = "s3cret"
        extra = {"HTTP_X_API_KEY": header} if header is not None else {}

        response = AdminAPIKeyMiddleware(_ok)(rf.get("/api/v1/admin/licenses", **extra))

        assert response.status_code == 401
        body = json.loads(response.content)
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"
        assert body["message"] == "Unauthorized - Invalid API key"

    def test_rejects_when_unconfigured(self, rf, settings):
        settings.ADMIN_API_KEY = ""
        response = AdminAPIKeyMiddleware(_ok)(rf.get("/api/v1/admin/licenses", HTTP_X_API_KEY=""))
        assert response.status_code == 401

    def test_accepts_valid_key(self, rf, settings):
        settings.ADMIN_API_KEY = "s3cret"
        request = rf.get("/api/v1/admin/licenses", HTTP_X_API_KEY="s3cret")

        response = AdminAPIKeyMiddleware(_ok)(request)

        assert response.status_code == 200
        assert request.is_admin is True


class TestRateLimitMiddleware:
    """Tests for RateLimitMiddleware."""

    @pytest.fixture(autouse=True)
    def clear_cache(self):
        cache.clear()
        yield
        cache.clear()

    def test_limits_per_ip(self, rf, settings):
        settings.RATE_LIMIT_MAX_REQUESTS = 2
        middleware = RateLimitMiddleware(_ok)

        first = middleware(rf.get("/api/v1/license/info", REMOTE_ADDR="10.0.0.1"))
        second = middleware(rf.get("/api/v1/license/info", REMOTE_ADDR="10.0.0.1"))
        third = middleware(rf.get("/api/v1/license/info", REMOTE_ADDR="10.0.0.1"))
        other = middleware(rf.get("/api/v1/license/info", REMOTE_ADDR="10.0.0.2"))

        assert first["X-RateLimit-Remaining"] == "1"
        assert second.status_code == 200
        assert third.status_code == 429
        assert json.loads(third.content)["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert "Retry-After" in third
        assert other.status_code == 200

    def test_forwarded_for_wins(self, rf, settings):
        settings.RATE_LIMIT_MAX_REQUESTS = 1
        middleware = RateLimitMiddleware(_ok)

        middleware(rf.get("/api/v1/license/info", HTTP_X_FORWARDED_FOR="1.2.3.4, 10.0.0.1"))
        blocked = middleware(rf.get("/api/v1/license/info", HTTP_X_FORWARDED_FOR="1.2.3.4"))

        assert blocked.status_code == 429

    def test_skips_non_api_paths(self, rf, settings):
        settings.RATE_LIMIT_MAX_REQUESTS = 1
        middleware = RateLimitMiddleware(_ok)
        for _ in range(3):
            response = middleware(rf.get("/health/"))
        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response


class TestObservabilityMiddleware:
    """Tests for ObservabilityMiddleware."""

    def test_adds_correlation_id(self, rf):
        response = ObservabilityMiddleware(_ok)(rf.get("/health/"))
        assert response["X-Correlation-ID"]
        assert response["X-Request-Status"] == "success"

    def test_reuses_incoming_correlation_id(self, rf):
        request = rf.get("/health/", HTTP_X_CORRELATION_ID="abc-123")
        response = ObservabilityMiddleware(_ok)(request)
        assert response["X-Correlation-ID"] == "abc-123"
        assert request.correlation_id == "abc-123"


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/v1/admin/licenses/ABCD-1234-EF56-7890/revoke", "/api/v1/admin/licenses/{key}/revoke"),
        ("/api/v1/items/5f1c2b9e-8a7d-4c3b-9e2f-1a2b3c4d5e6f", "/api/v1/items/{id}"),
        ("/api/v1/items/42/", "/api/v1/items/{id}/"),
        ("/api/v1/license/check", "/api/v1/license/check"),
    ],
)
def test_normalize_endpoint(path, expected):
    assert normalize_endpoint(path) == expected
