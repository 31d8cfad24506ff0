"""
API exception handlers.

This module provides custom exception handling for REST API responses.
Every error body has the shape
``{"success": false, "error": {"code", "message"}, "message"}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    ActivityUnauthorizedError,
    ConcurrentUpdateError,
    DomainException,
    DuplicateActiveLicenseError,
    InvalidCredentialsError,
    InvalidTransitionError,
    KeyCollisionError,
    LicenseInvalidError,
    LicenseNotFoundError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

_STATUS_BY_EXCEPTION = [
    (LicenseNotFoundError, status.HTTP_404_NOT_FOUND),
    (
        (InvalidCredentialsError, LicenseInvalidError, ActivityUnauthorizedError),
        status.HTTP_401_UNAUTHORIZED,
    ),
    (
        (DuplicateActiveLicenseError, InvalidTransitionError, ConcurrentUpdateError),
        status.HTTP_409_CONFLICT,
    ),
    (KeyCollisionError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def error_body(code: str, message: str, **extra) -> Dict[str, Any]:
    """Build the error response body."""
    error = {"code": code, "message": message}
    error.update(extra)
    return {"success": False, "error": error, "message": message}


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        response = _handle_domain_exception(exc, trace_id)
    elif isinstance(exc, ValidationError):
        response = Response(
            error_body("VALIDATION_ERROR", "Validation error", details=exc.detail),
            status=status.HTTP_400_BAD_REQUEST,
        )
    elif isinstance(exc, APIException):
        response = exception_handler(exc, context)
        code = exc.default_code.upper().replace("-", "_")
        detail = response.data.get("detail", exc.default_detail) if response else exc.default_detail
        response = Response(
            error_body(code, str(detail)), status=exc.status_code, headers=_headers(response)
        )
    elif isinstance(exc, Http404):
        response = Response(
            error_body("NOT_FOUND", "Resource not found"),
            status=status.HTTP_404_NOT_FOUND,
        )
    else:
        response = _handle_unexpected_exception(exc, trace_id)

    if response.status_code >= 500 or isinstance(exc, DomainException):
        errors_total.labels(
            error_type=getattr(exc, "code", type(exc).__name__), endpoint=_get_path(context)
        ).inc()
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def _headers(response: Optional[Response]) -> Dict[str, str]:
    """Carry over WWW-Authenticate and Retry-After set by DRF."""
    if not response:
        return {}
    return {name: response[name] for name in ("WWW-Authenticate", "Retry-After") if name in response}


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _get_path(context: Dict[str, Any]) -> str:
    request = context.get("request")
    return request.path if request else ""


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status.HTTP_400_BAD_REQUEST
    for exception_types, mapped_status in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exception_types):
            status_code = mapped_status
            break

    logger.warning("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response(error_body(exc.code, exc.message), status=status_code)


def _handle_unexpected_exception(exc: Exception, trace_id: Optional[str]) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return Response(
        error_body("INTERNAL_ERROR", "Internal server error"),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
