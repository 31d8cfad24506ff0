"""
Serializers for Public API endpoints.
"""

from rest_framework import serializers

from api.v1.common import FeatureSetSerializer
from licenses.domain.services import PUBLIC_TYPES


class CreateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for self-service license creation."""

    email = serializers.EmailField(required=True)
    licenseType = serializers.ChoiceField(
        choices=[t.value for t in PUBLIC_TYPES], source="license_type"
    )


class CreatedLicenseSerializer(serializers.Serializer):
    """Serializer for a freshly issued self-service license."""

    key = serializers.CharField()
    email = serializers.CharField()
    type = serializers.CharField(source="license_type")
    validDays = serializers.IntegerField(source="valid_days")
    expiresAt = serializers.DateTimeField(source="expires_at")
    features = FeatureSetSerializer()


class LicenseTypeSerializer(serializers.Serializer):
    """Serializer for a LicenseTypePolicy in the public catalogue."""

    id = serializers.CharField(source="license_type.value")
    name = serializers.CharField()
    days = serializers.IntegerField(source="duration_days")
    maxThreads = serializers.IntegerField(source="features.max_threads")
    description = serializers.CharField()
