"""
Admin API views.

Operator endpoints for issuing and managing licenses. Every request
under this prefix is authenticated by AdminAPIKeyMiddleware.
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activities.application.handlers.activity_stats_handlers import GetDashboardStatsHandler
from activities.application.queries.activity_queries import GetDashboardStatsQuery
from activities.infrastructure.repositories.django_activity_repository import (
    DjangoActivityRepository,
)
from api.v1.admin.serializers import (
    DashboardStatsSerializer,
    ExtendLicenseRequestSerializer,
    IssueLicenseRequestSerializer,
    ListLicensesQuerySerializer,
    RevokeLicenseRequestSerializer,
)
from api.v1.common import LicenseSerializer
from core.domain.value_objects import LicenseStatus
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.extend_license import ExtendLicenseCommand
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.commands.reactivate_license import ReactivateLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    ExtendLicenseHandler,
    ReactivateLicenseHandler,
    RevokeLicenseHandler,
)
from licenses.application.handlers.list_licenses_handler import ListLicensesHandler
from licenses.application.queries.list_licenses import ListLicensesQuery
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_activity_repo = DjangoActivityRepository()

tracer = get_tracer(__name__)

_LIVE_STATUSES = [s.value for s in LicenseStatus if s.is_live]

_AUTH_RESPONSES = {401: {"description": "Unauthorized - Invalid API key"}}

_LICENSE_KEY_PARAMETER = OpenApiParameter(
    name="license_key",
    type=str,
    location=OpenApiParameter.PATH,
    description="License key (XXXX-XXXX-XXXX-XXXX)",
)

_PAGING_PARAMETERS = [
    OpenApiParameter(name="page", type=int, required=False),
    OpenApiParameter(name="limit", type=int, required=False, description="1-100, default 20"),
]


def _validated(serializer, span):
    if not serializer.is_valid():
        span.set_attribute("error", "validation_failed")
        span.set_status(Status(StatusCode.ERROR, "Validation failed"))
        raise ValidationError(serializer.errors)
    return serializer.validated_data


def _license_body(license) -> dict:
    return LicenseSerializer(LicenseDTO.from_entity(license)).data


def _page_body(page) -> dict:
    return {
        "success": True,
        "licenses": LicenseSerializer(page.licenses, many=True).data,
        "pagination": {
            "page": page.page,
            "limit": page.limit,
            "total": page.total,
            "pages": page.pages,
        },
    }


class LicenseCollectionView(APIView):
    """Issue licenses and list them."""

    @extend_schema(
        operation_id="admin_issue_license",
        summary="Issue License",
        description=(
            "Issue a license for an email. Fails with 409 when the email already "
            "holds an active or trial license."
        ),
        tags=["Admin API"],
        request=IssueLicenseRequestSerializer,
        responses={
            201: LicenseSerializer,
            400: {"description": "Bad Request - Validation error"},
            409: {"description": "Email already has an active license"},
            **_AUTH_RESPONSES,
        },
    )
    def post(self, request: Request) -> Response:
        """Issue a license."""
        return async_to_sync(self._handle_issue)(request)

    async def _handle_issue(self, request: Request) -> Response:
        """Async handler for issue license."""
        with tracer.start_as_current_span("admin_issue_license") as span:
            span.set_attribute("operation", "admin_issue_license")
            data = _validated(IssueLicenseRequestSerializer(data=request.data), span)
            span.set_attribute("license.type", data["type"])

            handler = IssueLicenseHandler(license_repository=_license_repo)
            try:
                license = await handler.handle(
                    IssueLicenseCommand(
                        email=data["email"],
                        license_type=data["type"],
                        days=data.get("days"),
                        feature_overrides=data.get("features"),
                        notes=data.get("notes") or None,
                    )
                )
            except ValueError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                raise ValidationError({"features": [str(e)]}) from e

            span.set_attribute("license.key", license.key)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "License created successfully",
                    "license": _license_body(license),
                },
                status=status.HTTP_201_CREATED,
            )

    @extend_schema(
        operation_id="admin_list_licenses",
        summary="List Licenses",
        description="Page through licenses, newest first, optionally filtered by status and type.",
        tags=["Admin API"],
        parameters=[
            OpenApiParameter(name="status", type=str, required=False),
            OpenApiParameter(name="type", type=str, required=False),
        ]
        + _PAGING_PARAMETERS,
        responses={200: LicenseSerializer(many=True), **_AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List licenses."""
        return async_to_sync(self._handle_list)(request)

    async def _handle_list(self, request: Request) -> Response:
        """Async handler for list licenses."""
        with tracer.start_as_current_span("admin_list_licenses") as span:
            span.set_attribute("operation", "admin_list_licenses")
            data = _validated(ListLicensesQuerySerializer(data=request.query_params), span)

            page = await ListLicensesHandler(license_repository=_license_repo).handle(
                ListLicensesQuery(
                    statuses=[data["status"]] if data.get("status") else None,
                    license_type=data.get("type"),
                    page=data["page"],
                    limit=data["limit"],
                )
            )

            span.set_attribute("licenses.total", page.total)
            span.set_status(Status(StatusCode.OK))
            return Response(_page_body(page))


class ActiveLicensesView(APIView):
    """List active and trial licenses."""

    @extend_schema(
        operation_id="admin_list_active_licenses",
        summary="List Active Licenses",
        description="Page through licenses whose status is active or trial.",
        tags=["Admin API"],
        parameters=_PAGING_PARAMETERS,
        responses={200: LicenseSerializer(many=True), **_AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List live licenses."""
        return async_to_sync(self._handle_list_active)(request)

    async def _handle_list_active(self, request: Request) -> Response:
        with tracer.start_as_current_span("admin_list_active_licenses") as span:
            span.set_attribute("operation", "admin_list_active_licenses")
            data = _validated(ListLicensesQuerySerializer(data=request.query_params), span)

            page = await ListLicensesHandler(license_repository=_license_repo).handle(
                ListLicensesQuery(statuses=_LIVE_STATUSES, page=data["page"], limit=data["limit"])
            )

            span.set_attribute("licenses.total", page.total)
            span.set_status(Status(StatusCode.OK))
            return Response(_page_body(page))


class RevokeLicenseView(APIView):
    """Revoke a license."""

    @extend_schema(
        operation_id="admin_revoke_license",
        summary="Revoke License",
        description="Revoke a license with a reason. Revoking a revoked license changes nothing.",
        tags=["Admin API"],
        parameters=[_LICENSE_KEY_PARAMETER],
        request=RevokeLicenseRequestSerializer,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
            **_AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Revoke a license."""
        return async_to_sync(self._handle_revoke)(request, license_key)

    async def _handle_revoke(self, request: Request, license_key: str) -> Response:
        """Async handler for revoke license."""
        with tracer.start_as_current_span("admin_revoke_license") as span:
            span.set_attribute("operation", "admin_revoke_license")
            span.set_attribute("license.key", license_key)
            data = _validated(RevokeLicenseRequestSerializer(data=request.data), span)

            license = await RevokeLicenseHandler(license_repository=_license_repo).handle(
                RevokeLicenseCommand(license_key=license_key, reason=data["reason"])
            )

            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "License revoked successfully",
                    "license": _license_body(license),
                }
            )


class ReactivateLicenseView(APIView):
    """Reactivate a revoked license."""

    @extend_schema(
        operation_id="admin_reactivate_license",
        summary="Reactivate License",
        description=(
            "Clear a revocation. The license comes back as active with its expiry "
            "unchanged; a lapsed license must also be extended."
        ),
        tags=["Admin API"],
        parameters=[_LICENSE_KEY_PARAMETER],
        request=None,
        responses={
            200: {"description": "License reactivated"},
            404: {"description": "License not found"},
            409: {"description": "License is not revoked or email has another live license"},
            **_AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Reactivate a license."""
        return async_to_sync(self._handle_reactivate)(request, license_key)

    async def _handle_reactivate(self, request: Request, license_key: str) -> Response:
        """Async handler for reactivate license."""
        with tracer.start_as_current_span("admin_reactivate_license") as span:
            span.set_attribute("operation", "admin_reactivate_license")
            span.set_attribute("license.key", license_key)

            license = await ReactivateLicenseHandler(license_repository=_license_repo).handle(
                ReactivateLicenseCommand(license_key=license_key)
            )

            span.set_attribute("license.status", license.status.value)
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "License reactivated successfully",
                    "status": license.status.value,
                }
            )


class ExtendLicenseView(APIView):
    """Extend a license."""

    @extend_schema(
        operation_id="admin_extend_license",
        summary="Extend License",
        description=(
            "Add days to a license's expiry. An expired license whose new expiry "
            "is in the future becomes active again."
        ),
        tags=["Admin API"],
        parameters=[_LICENSE_KEY_PARAMETER],
        request=ExtendLicenseRequestSerializer,
        responses={
            200: {"description": "License extended"},
            404: {"description": "License not found"},
            409: {"description": "Extension refused"},
            **_AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Extend a license."""
        return async_to_sync(self._handle_extend)(request, license_key)

    async def _handle_extend(self, request: Request, license_key: str) -> Response:
        """Async handler for extend license."""
        with tracer.start_as_current_span("admin_extend_license") as span:
            span.set_attribute("operation", "admin_extend_license")
            span.set_attribute("license.key", license_key)
            data = _validated(ExtendLicenseRequestSerializer(data=request.data), span)

            license = await ExtendLicenseHandler(license_repository=_license_repo).handle(
                ExtendLicenseCommand(license_key=license_key, days=data["days"])
            )

            span.set_attribute("license.days", data["days"])
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "success": True,
                    "message": "License extended successfully",
                    "newExpiryDate": license.expires_at.isoformat(),
                    "status": license.status.value,
                }
            )


class DashboardStatsView(APIView):
    """Aggregate statistics for the admin dashboard."""

    @extend_schema(
        operation_id="admin_dashboard_stats",
        summary="Dashboard Stats",
        description=(
            "License counts by status, activity counts by action over the last "
            "30 days and daily active users over the last 7 days."
        ),
        tags=["Admin API"],
        responses={200: DashboardStatsSerializer, **_AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """Get dashboard statistics."""
        return async_to_sync(self._handle_dashboard)(request)

    async def _handle_dashboard(self, request: Request) -> Response:
        with tracer.start_as_current_span("admin_dashboard_stats") as span:
            span.set_attribute("operation", "admin_dashboard_stats")

            stats = await GetDashboardStatsHandler(
                license_repository=_license_repo,
                activity_repository=_activity_repo,
            ).handle(GetDashboardStatsQuery())

            span.set_attribute("licenses.total", stats.licenses["total"])
            span.set_status(Status(StatusCode.OK))
            return Response({"success": True, "stats": DashboardStatsSerializer(stats).data})
