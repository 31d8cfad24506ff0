"""
Public API views.

Unauthenticated self-service endpoints: license creation and the
license type catalogue.
"""

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.public.serializers import (
    CreateLicenseRequestSerializer,
    CreatedLicenseSerializer,
    LicenseTypeSerializer,
)
from core.domain.value_objects import LicenseType
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.domain.services import IssuancePolicy
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()

tracer = get_tracer(__name__)


class CreateLicenseView(APIView):
    """Self-service license creation."""

    @extend_schema(
        operation_id="public_create_license",
        summary="Create License",
        description=(
            "Create a trial, basic, pro or enterprise license for an email with the "
            "type's default duration and features."
        ),
        tags=["Public API"],
        request=CreateLicenseRequestSerializer,
        responses={
            201: CreatedLicenseSerializer,
            400: {"description": "Bad Request - Validation error"},
            409: {"description": "Email already has an active license"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a license."""
        return async_to_sync(self._handle_create)(request)

    async def _handle_create(self, request: Request) -> Response:
        """Async handler for self-service license creation."""
        with tracer.start_as_current_span("public_create_license") as span:
            span.set_attribute("operation", "public_create_license")
            serializer = CreateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                raise ValidationError(serializer.errors)
            data = serializer.validated_data

            policy = IssuancePolicy.from_settings(settings)
            handler = IssueLicenseHandler(license_repository=_license_repo, policy=policy)
            license = await handler.handle(
                IssueLicenseCommand(email=data["email"], license_type=data["license_type"])
            )

            span.set_attribute("license.type", license.license_type.value)
            span.set_attribute("license.key", license.key)
            span.set_status(Status(StatusCode.OK))
            body = {
                "key": license.key,
                "email": str(license.email),
                "license_type": license.license_type.value,
                "valid_days": policy.duration_for(LicenseType(data["license_type"])),
                "expires_at": license.expires_at,
                "features": license.features.to_dict(),
            }
            return Response(
                {"success": True, "license": CreatedLicenseSerializer(body).data},
                status=status.HTTP_201_CREATED,
            )


class LicenseTypesView(APIView):
    """Catalogue of self-service license types."""

    @extend_schema(
        operation_id="public_license_types",
        summary="List License Types",
        tags=["Public API"],
        responses={200: LicenseTypeSerializer(many=True)},
    )
    def get(self, request: Request) -> Response:
        """List license types."""
        catalogue = IssuancePolicy.from_settings(settings).catalogue()
        return Response(
            {"success": True, "types": LicenseTypeSerializer(catalogue, many=True).data}
        )
