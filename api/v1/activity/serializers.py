"""
Serializers for Activity API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import ActivityAction


class LogActivityRequestSerializer(serializers.Serializer):
    """Serializer for log activity request."""

    email = serializers.EmailField(required=True)
    action = serializers.ChoiceField(choices=[a.value for a in ActivityAction])
    data = serializers.DictField(required=False, default=dict)
    version = serializers.CharField(required=False, allow_blank=True, max_length=50)
    timestamp = serializers.IntegerField(required=False)


class UserStatsQuerySerializer(serializers.Serializer):
    """Serializer for user stats query parameters."""

    email = serializers.EmailField(required=True)
    key = serializers.CharField(required=True, max_length=64)
    startDate = serializers.DateTimeField(required=False, source="start_date")
    endDate = serializers.DateTimeField(required=False, source="end_date")

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError("startDate must not be after endDate")
        return attrs


class ActivitySummaryQuerySerializer(serializers.Serializer):
    """Serializer for activity summary query parameters."""

    email = serializers.EmailField(required=True)
    key = serializers.CharField(required=True, max_length=64)
    period = serializers.CharField(required=False, default="7d", max_length=10)


class ActionSummarySerializer(serializers.Serializer):
    action = serializers.CharField()
    count = serializers.IntegerField()
    lastOccurrence = serializers.DateTimeField(source="last_occurrence")


class GeneralStatsSerializer(serializers.Serializer):
    totalActivities = serializers.IntegerField(source="total_activities")
    activities = ActionSummarySerializer(many=True)


class PostingStatsSerializer(serializers.Serializer):
    totalSessions = serializers.IntegerField(source="total_sessions")
    totalThreadsPosted = serializers.IntegerField(source="total_threads_posted")
    totalThreadsFailed = serializers.IntegerField(source="total_threads_failed")
    avgThreadsPerSession = serializers.FloatField(source="avg_threads_per_session")


class ActivityEventSerializer(serializers.Serializer):
    """Serializer for an ActivityEvent in recent activity lists."""

    action = serializers.CharField(source="action.value")
    data = serializers.DictField()
    createdAt = serializers.DateTimeField(source="created_at")
    success = serializers.BooleanField()
    errorMessage = serializers.CharField(source="error_message", allow_null=True)


class UserStatsSerializer(serializers.Serializer):
    """Serializer for UserStatsDTO."""

    stats = serializers.SerializerMethodField()
    recentActivities = ActivityEventSerializer(source="recent_activities", many=True)

    def get_stats(self, obj) -> dict:
        return {
            "general": GeneralStatsSerializer(obj.general).data,
            "posting": PostingStatsSerializer(obj.posting).data,
        }


class ActionCountSerializer(serializers.Serializer):
    action = serializers.CharField()
    count = serializers.IntegerField()


class DailySummarySerializer(serializers.Serializer):
    date = serializers.CharField()
    activities = ActionCountSerializer(many=True)
    totalActivities = serializers.IntegerField(source="total_activities")


class ActivitySummarySerializer(serializers.Serializer):
    """Serializer for ActivitySummaryDTO."""

    period = serializers.CharField()
    startDate = serializers.DateTimeField(source="start_date")
    endDate = serializers.DateTimeField(source="end_date")
    summary = DailySummarySerializer(many=True)
