"""
Shared serializers and helpers for the v1 API.

JSON field names follow the client's camelCase contract.
"""

from rest_framework import serializers
from rest_framework.request import Request

from core.domain.value_objects import ClientMetadata


class EpochMillisecondsField(serializers.Field):
    """Datetime rendered as milliseconds since the epoch."""

    def to_representation(self, value):
        return int(value.timestamp() * 1000)


class FeatureSetSerializer(serializers.Serializer):
    """Serializer for a feature set dict as produced by FeatureSet.to_dict()."""

    maxThreads = serializers.IntegerField(source="max_threads")
    customDelays = serializers.BooleanField(source="custom_delays")
    advancedMode = serializers.BooleanField(source="advanced_mode")
    priority = serializers.CharField()


class LicenseSerializer(serializers.Serializer):
    """Serializer for LicenseDTO on the admin and public surfaces."""

    id = serializers.UUIDField()
    key = serializers.CharField()
    email = serializers.CharField()
    status = serializers.CharField()
    type = serializers.CharField(source="license_type")
    features = FeatureSetSerializer()
    activatedAt = serializers.DateTimeField(source="activated_at")
    expiresAt = serializers.DateTimeField(source="expires_at")
    lastChecked = serializers.DateTimeField(source="last_checked", allow_null=True)
    checkCount = serializers.IntegerField(source="check_count")
    revoked = serializers.SerializerMethodField()
    notes = serializers.CharField(allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    def get_revoked(self, obj) -> dict:
        return {
            "status": obj.revoked,
            "reason": obj.revoked_reason,
            "date": serializers.DateTimeField().to_representation(obj.revoked_at)
            if obj.revoked_at
            else None,
        }


def client_metadata(request: Request, version: str = None) -> ClientMetadata:
    """
    Caller details for a request.

    The first X-Forwarded-For entry wins over REMOTE_ADDR.
    """
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    ip = forwarded.split(",")[0].strip() if forwarded else request.META.get("REMOTE_ADDR")
    return ClientMetadata(
        ip=ip or None,
        user_agent=request.META.get("HTTP_USER_AGENT") or None,
        client_version=version or None,
    )
