"""
Serializers for the client License API endpoints.
"""

from rest_framework import serializers

from api.v1.common import EpochMillisecondsField, FeatureSetSerializer


class LicenseCredentialsSerializer(serializers.Serializer):
    """Serializer for validate and check requests."""

    email = serializers.EmailField(required=True)
    key = serializers.CharField(required=True, max_length=64)
    version = serializers.CharField(required=False, allow_blank=True, max_length=50)
    timestamp = serializers.IntegerField(required=False)


class LicenseInfoQuerySerializer(serializers.Serializer):
    """Serializer for license info query parameters."""

    email = serializers.EmailField(required=True)
    key = serializers.CharField(required=True, max_length=64)


class ValidateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for the payload of a successful validation."""

    expiresAt = EpochMillisecondsField(source="expires_at")
    features = FeatureSetSerializer()
    type = serializers.CharField(source="license_type")


class CheckLicenseResponseSerializer(serializers.Serializer):
    """Serializer for the payload of a successful periodic check."""

    valid = serializers.BooleanField()
    expiresAt = EpochMillisecondsField(source="expires_at")
    features = FeatureSetSerializer()
    type = serializers.CharField(source="license_type")
    daysLeft = serializers.IntegerField(source="days_left")


class LicenseInfoSerializer(serializers.Serializer):
    """Serializer for LicenseInfoDTO."""

    email = serializers.CharField()
    type = serializers.CharField(source="license_type")
    status = serializers.CharField()
    features = FeatureSetSerializer()
    activatedAt = serializers.DateTimeField(source="activated_at")
    expiresAt = serializers.DateTimeField(source="expires_at")
    daysLeft = serializers.IntegerField(source="days_left")
    isValid = serializers.BooleanField(source="is_valid")
