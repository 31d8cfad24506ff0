"""
Health and readiness endpoints.

``run_checks`` maps each dependency check to ``None`` or its error message.
The license and activity stores are checked separately so a missing
migration on one app shows up on its own.
"""
import logging
from typing import Callable, Dict, Optional

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from activities.infrastructure.models import ActivityEvent
from licenses.infrastructure.models import License

logger = logging.getLogger(__name__)

SERVICE_NAME = "license-service"


def _ping_database() -> None:
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")


def _ping_cache() -> None:
    cache.set("health_check", "ok", 10)
    if cache.get("health_check") != "ok":
        raise RuntimeError("cache round trip failed")


def _ping_license_store() -> None:
    License.objects.only("id").exists()


def _ping_activity_store() -> None:
    ActivityEvent.objects.only("id").exists()


STORE_CHECKS: Dict[str, Callable[[], None]] = {
    "database": _ping_database,
    "license_store": _ping_license_store,
    "activity_store": _ping_activity_store,
}

CACHE_CHECKS: Dict[str, Callable[[], None]] = {"cache": _ping_cache}


def run_checks(checks: Dict[str, Callable[[], None]]) -> Dict[str, Optional[str]]:
    """Run each check, mapping its name to None or the failure message."""
    results = {}
    for name, check in checks.items():
        try:
            check()
            results[name] = None
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Health check %s failed: %s", name, e)
            results[name] = str(e)
    return results


def _checks_response(checks: Dict[str, Callable[[], None]], ok: str, failed: str) -> JsonResponse:
    results = run_checks(checks)
    healthy = not any(results.values())
    body = {
        "status": ok if healthy else failed,
        "checks": {name: "ok" if error is None else "failed" for name, error in results.items()},
    }
    errors = {name: error for name, error in results.items() if error}
    if errors:
        body["errors"] = errors
    return JsonResponse(body, status=200 if healthy else 503)


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Liveness: the process is up and serving requests."""

    def get(self, _request):
        return JsonResponse({"status": "healthy", "service": SERVICE_NAME})


@method_decorator(csrf_exempt, name="dispatch")
class HealthDBView(View):
    """Database connectivity plus the license and activity tables."""

    def get(self, _request):
        return _checks_response(STORE_CHECKS, "healthy", "unhealthy")


@method_decorator(csrf_exempt, name="dispatch")
class HealthCacheView(View):
    """Cache round trip, used by the rate limiter."""

    def get(self, _request):
        return _checks_response(CACHE_CHECKS, "healthy", "unhealthy")


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness: every store and the cache must answer."""

    def get(self, _request):
        return _checks_response({**STORE_CHECKS, **CACHE_CHECKS}, "ready", "not_ready")
