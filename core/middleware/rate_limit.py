"""
Rate limiting middleware.

Implements a fixed-window rate limit per client IP on the API.
"""

import hashlib
import time
from typing import Callable, Tuple

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse, JsonResponse

from core.metrics import errors_total


class RateLimitMiddleware:
    """
    Rate limiting middleware per client IP.

    Counters live in the Django cache, so limits are shared by every
    worker that shares the cache. Window and limit come from
    RATE_LIMIT_WINDOW_SECONDS and RATE_LIMIT_MAX_REQUESTS.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    @property
    def window(self) -> int:
        return getattr(settings, "RATE_LIMIT_WINDOW_SECONDS", 15 * 60)

    @property
    def limit(self) -> int:
        return getattr(settings, "RATE_LIMIT_MAX_REQUESTS", 100)

    def _get_client_ip(self, request: HttpRequest) -> str:
        """
        Extract client IP from request.

        The first X-Forwarded-For entry wins over REMOTE_ADDR.
        """
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR", "unknown")

    def _get_rate_limit_key(self, client_ip: str, window_start: int) -> str:
        """
        Generate cache key for rate limiting.

        Args:
            client_ip: Client IP address
            window_start: Index of the current window

        Returns:
            Cache key string
        """
        ip_hash = hashlib.sha256(client_ip.encode()).hexdigest()[:16]
        return f"rate_limit:{ip_hash}:{window_start}"

    def _check_rate_limit(self, client_ip: str) -> Tuple[bool, int, int]:
        """
        Check if request is within rate limit.

        Args:
            client_ip: Client IP address

        Returns:
            Tuple of (is_allowed, remaining, reset_time)
        """
        window = self.window
        limit = self.limit
        window_start = int(time.time() / window)
        reset_time = (window_start + 1) * window
        cache_key = self._get_rate_limit_key(client_ip, window_start)

        if cache.get(cache_key, 0) >= limit:
            return False, 0, reset_time

        try:
            new_count = cache.incr(cache_key, 1)
        except ValueError:
            # Key doesn't exist yet
            cache.set(cache_key, 1, timeout=window)
            new_count = 1

        return True, max(0, limit - new_count), reset_time

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request with rate limiting.

        Args:
            request: HTTP request

        Returns:
            HTTP response with rate limit headers
        """
        if not request.path.startswith("/api/") or request.path.startswith(
            ("/api/docs", "/api/redoc", "/api/schema")
        ):
            return self.get_response(request)

        is_allowed, remaining, reset_time = self._check_rate_limit(self._get_client_ip(request))

        if not is_allowed:
            errors_total.labels(error_type="rate_limit_exceeded", endpoint=request.path).inc()
            message = "Too many requests from this IP, please try again later."
            response = JsonResponse(
                {
                    "success": False,
                    "error": {"code": "RATE_LIMIT_EXCEEDED", "message": message},
                    "message": message,
                },
                status=429,
            )
            response["Retry-After"] = str(max(0, reset_time - int(time.time())))
        else:
            response = self.get_response(request)

        response["X-RateLimit-Limit"] = str(self.limit)
        response["X-RateLimit-Remaining"] = str(remaining)
        response["X-RateLimit-Reset"] = str(reset_time)
        return response
