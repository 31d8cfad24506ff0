"""
Activity API views.

These endpoints are used by client installations to:
- Report activity
- Read their own usage statistics
"""

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activities.application.commands.log_activity import LogActivityCommand
from activities.application.handlers.activity_stats_handlers import (
    GetActivitySummaryHandler,
    GetUserStatsHandler,
)
from activities.application.handlers.log_activity_handler import LogActivityHandler
from activities.application.queries.activity_queries import (
    GetActivitySummaryQuery,
    GetUserStatsQuery,
)
from activities.infrastructure.repositories.django_activity_repository import (
    DjangoActivityRepository,
)
from api.v1.activity.serializers import (
    ActivitySummaryQuerySerializer,
    ActivitySummarySerializer,
    LogActivityRequestSerializer,
    UserStatsQuerySerializer,
    UserStatsSerializer,
)
from api.v1.common import client_metadata
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_activity_repo = DjangoActivityRepository()

tracer = get_tracer(__name__)

_CREDENTIAL_PARAMETERS = [
    OpenApiParameter(name="email", type=str, required=True),
    OpenApiParameter(name="key", type=str, required=True),
]


class LogActivityView(APIView):
    """View for logging client activity."""

    @extend_schema(
        operation_id="log_activity",
        summary="Log Activity",
        description="Append an activity event for the live license of the given email.",
        tags=["Activity API"],
        request=LogActivityRequestSerializer,
        responses={
            200: {"description": "Activity logged"},
            400: {"description": "Bad Request - Validation error"},
            401: {"description": "No active license found"},
        },
    )
    def post(self, request: Request) -> Response:
        """Log an activity."""
        return async_to_sync(self._handle_log_activity)(request)

    async def _handle_log_activity(self, request: Request) -> Response:
        """Async handler for log activity."""
        with tracer.start_as_current_span("log_activity") as span:
            span.set_attribute("operation", "log_activity")
            serializer = LogActivityRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                raise ValidationError(serializer.errors)
            data = serializer.validated_data

            handler = LogActivityHandler(
                license_repository=_license_repo,
                activity_repository=_activity_repo,
            )
            event = await handler.handle(
                LogActivityCommand(
                    email=data["email"],
                    action=data["action"],
                    data=data.get("data") or {},
                    client=client_metadata(request, data.get("version")),
                )
            )

            span.set_attribute("activity.action", event.action.value)
            span.set_status(Status(StatusCode.OK))
            return Response({"success": True, "message": "Activity logged successfully"})


class UserStatsView(APIView):
    """View for a user's activity statistics."""

    @extend_schema(
        operation_id="get_user_stats",
        summary="Get User Stats",
        description=(
            "Activity counts per action, posting rollup and the 20 most recent "
            "activities. Requires a currently valid email + key pair."
        ),
        tags=["Activity API"],
        parameters=_CREDENTIAL_PARAMETERS
        + [
            OpenApiParameter(name="startDate", type=str, required=False),
            OpenApiParameter(name="endDate", type=str, required=False),
        ],
        responses={
            200: UserStatsSerializer,
            400: {"description": "Bad Request - Validation error"},
            401: {"description": "Invalid or expired license"},
        },
    )
    def get(self, request: Request) -> Response:
        """Get user statistics."""
        return async_to_sync(self._handle_user_stats)(request)

    async def _handle_user_stats(self, request: Request) -> Response:
        """Async handler for user stats."""
        with tracer.start_as_current_span("get_user_stats") as span:
            span.set_attribute("operation", "get_user_stats")
            serializer = UserStatsQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                raise ValidationError(serializer.errors)
            data = serializer.validated_data

            handler = GetUserStatsHandler(
                license_repository=_license_repo,
                activity_repository=_activity_repo,
            )
            stats = await handler.handle(
                GetUserStatsQuery(
                    email=data["email"],
                    license_key=data["key"],
                    start_date=data.get("start_date"),
                    end_date=data.get("end_date"),
                )
            )

            span.set_attribute("activities.total", stats.general["total_activities"])
            span.set_status(Status(StatusCode.OK))
            return Response({"success": True, **UserStatsSerializer(stats).data})


class ActivitySummaryView(APIView):
    """View for a per-day activity summary."""

    @extend_schema(
        operation_id="get_activity_summary",
        summary="Get Activity Summary",
        description="Per-day activity counts over 24h, 7d or 30d (default 7d).",
        tags=["Activity API"],
        parameters=_CREDENTIAL_PARAMETERS
        + [OpenApiParameter(name="period", type=str, required=False, enum=["24h", "7d", "30d"])],
        responses={
            200: ActivitySummarySerializer,
            400: {"description": "Bad Request - Validation error"},
            401: {"description": "Invalid or expired license"},
        },
    )
    def get(self, request: Request) -> Response:
        """Get activity summary."""
        return async_to_sync(self._handle_summary)(request)

    async def _handle_summary(self, request: Request) -> Response:
        """Async handler for activity summary."""
        with tracer.start_as_current_span("get_activity_summary") as span:
            span.set_attribute("operation", "get_activity_summary")
            serializer = ActivitySummaryQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                raise ValidationError(serializer.errors)
            data = serializer.validated_data

            handler = GetActivitySummaryHandler(
                license_repository=_license_repo,
                activity_repository=_activity_repo,
            )
            summary = await handler.handle(
                GetActivitySummaryQuery(
                    email=data["email"],
                    license_key=data["key"],
                    period=data["period"],
                )
            )

            span.set_attribute("activity.period", summary.period)
            span.set_status(Status(StatusCode.OK))
            return Response({"success": True, **ActivitySummarySerializer(summary).data})
