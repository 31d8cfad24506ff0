"""
License API views.

These endpoints are used by client installations to:
- Validate (activate) a license
- Run periodic license checks
- Read license details
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activities.application.services.activity_recorder import ActivityRecorder
from activities.infrastructure.repositories.django_activity_repository import (
    DjangoActivityRepository,
)
from api.v1.common import client_metadata
from api.v1.license.serializers import (
    CheckLicenseResponseSerializer,
    LicenseCredentialsSerializer,
    LicenseInfoQuerySerializer,
    LicenseInfoSerializer,
    ValidateLicenseResponseSerializer,
)
from core.domain.exceptions import LicenseInvalidError
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.check_license import (
    CheckLicenseCommand,
    ValidateLicenseCommand,
)
from licenses.application.handlers.check_license_handlers import (
    CheckLicenseHandler,
    GetLicenseInfoHandler,
    ValidateLicenseHandler,
)
from licenses.application.queries.get_license_info import GetLicenseInfoQuery
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_activity_repo = DjangoActivityRepository()

tracer = get_tracer(__name__)

_ERROR_RESPONSES = {
    400: {"description": "Bad Request - Validation error"},
    401: {"description": "Unauthorized - Invalid credentials or license not valid"},
}


def _validated(serializer, span):
    if not serializer.is_valid():
        span.set_attribute("error", "validation_failed")
        span.set_status(Status(StatusCode.ERROR, "Validation failed"))
        raise ValidationError(serializer.errors)
    return serializer.validated_data


class ValidateLicenseView(APIView):
    """View for validating and activating a license."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Validate an email + license key pair and activate the license on the "
            "calling client. Returns the expiry as epoch milliseconds and the "
            "entitled features."
        ),
        tags=["License API"],
        request=LicenseCredentialsSerializer,
        responses={200: ValidateLicenseResponseSerializer, **_ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        """Validate and activate a license."""
        return async_to_sync(self._handle_validate)(request)

    async def _handle_validate(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")
            data = _validated(LicenseCredentialsSerializer(data=request.data), span)

            handler = ValidateLicenseHandler(
                license_repository=_license_repo,
                recorder=ActivityRecorder(_activity_repo),
            )
            result = await handler.handle(
                ValidateLicenseCommand(
                    email=data["email"],
                    license_key=data["key"],
                    client=client_metadata(request, data.get("version")),
                )
            )
            span.set_attribute("license.valid", result.valid)

            if not result.valid:
                span.set_status(Status(StatusCode.ERROR, result.reason))
                raise LicenseInvalidError(result.reason)

            span.set_attribute("license.type", result.license_type)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "License activated successfully",
                    **ValidateLicenseResponseSerializer(result).data,
                }
            )


class CheckLicenseView(APIView):
    """View for periodic license checks."""

    @extend_schema(
        operation_id="check_license",
        summary="Check License",
        description="Periodic validity check from a client. Counts as a license check.",
        tags=["License API"],
        request=LicenseCredentialsSerializer,
        responses={200: CheckLicenseResponseSerializer, **_ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        """Check a license."""
        return async_to_sync(self._handle_check)(request)

    async def _handle_check(self, request: Request) -> Response:
        """Async handler for check license."""
        with tracer.start_as_current_span("check_license") as span:
            span.set_attribute("operation", "check_license")
            data = _validated(LicenseCredentialsSerializer(data=request.data), span)

            handler = CheckLicenseHandler(
                license_repository=_license_repo,
                recorder=ActivityRecorder(_activity_repo),
            )
            result = await handler.handle(
                CheckLicenseCommand(
                    email=data["email"],
                    license_key=data["key"],
                    client=client_metadata(request, data.get("version")),
                )
            )
            span.set_attribute("license.valid", result.valid)

            if not result.valid:
                span.set_status(Status(StatusCode.ERROR, result.reason))
                raise LicenseInvalidError(result.reason)

            span.set_attribute("license.days_left", result.days_left)
            span.set_status(Status(StatusCode.OK))
            return Response({"success": True, **CheckLicenseResponseSerializer(result).data})


class LicenseInfoView(APIView):
    """View for reading license details."""

    @extend_schema(
        operation_id="get_license_info",
        summary="Get License Info",
        description="Read-only license details. Does not count as a check.",
        tags=["License API"],
        parameters=[
            OpenApiParameter(name="email", type=str, required=True),
            OpenApiParameter(name="key", type=str, required=True),
        ],
        responses={
            200: LicenseInfoSerializer,
            400: {"description": "Bad Request - Validation error"},
            404: {"description": "License not found"},
        },
    )
    def get(self, request: Request) -> Response:
        """Get license details."""
        return async_to_sync(self._handle_info)(request)

    async def _handle_info(self, request: Request) -> Response:
        """Async handler for license info."""
        with tracer.start_as_current_span("get_license_info") as span:
            span.set_attribute("operation", "get_license_info")
            data = _validated(LicenseInfoQuerySerializer(data=request.query_params), span)

            handler = GetLicenseInfoHandler(license_repository=_license_repo)
            info = await handler.handle(
                GetLicenseInfoQuery(email=data["email"], license_key=data["key"])
            )

            span.set_attribute("license.status", info.status)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {"success": True, "license": LicenseInfoSerializer(info).data},
                status=status.HTTP_200_OK,
            )
