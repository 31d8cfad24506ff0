"""
Admin API key authentication middleware.

This middleware guards the admin API with a shared API key.
"""

import hmac
import logging
from typing import Optional

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX = "/api/v1/admin/"


class AdminAPIKeyMiddleware(MiddlewareMixin):
    """
    Middleware for admin API key authentication.

    This middleware:
    1. Only looks at admin API paths (/api/v1/admin/*)
    2. Compares the X-API-Key header with settings.ADMIN_API_KEY in constant time
    3. Returns 401 Unauthorized if authentication fails
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Process request and validate authentication.

        Args:
            request: HTTP request

        Returns:
            HttpResponse with 401 if authentication fails, None otherwise
        """
        if not request.path.startswith(ADMIN_API_PREFIX):
            return None

        expected = getattr(settings, "ADMIN_API_KEY", "")
        header = getattr(settings, "ADMIN_API_KEY_HEADER", "X-API-Key")
        provided = request.headers.get(header, "")

        if not expected or not provided or not hmac.compare_digest(
            provided.encode(), expected.encode()
        ):
            logger.warning(
                "Rejected admin API request",
                extra={"path": request.path, "remote_addr": request.META.get("REMOTE_ADDR")},
            )
            message = "Unauthorized - Invalid API key"
            return JsonResponse(
                {
                    "success": False,
                    "error": {"code": "UNAUTHORIZED", "message": message},
                    "message": message,
                },
                status=401,
            )

        request.is_admin = True  # type: ignore
        return None
