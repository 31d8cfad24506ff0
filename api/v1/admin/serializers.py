"""
Serializers for Admin API endpoints.
"""

from rest_framework import serializers

from core.domain.value_objects import LicenseStatus, LicenseType, Priority

MAX_LICENSE_DAYS = 3650


class FeatureOverridesSerializer(serializers.Serializer):
    """Partial feature overrides in the client's camelCase."""

    maxThreads = serializers.IntegerField(required=False, min_value=0, source="max_threads")
    customDelays = serializers.BooleanField(required=False, source="custom_delays")
    advancedMode = serializers.BooleanField(required=False, source="advanced_mode")
    priority = serializers.ChoiceField(choices=[p.value for p in Priority], required=False)

    def to_internal_value(self, data):
        if isinstance(data, dict):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError(
                    {name: ["Unknown feature."] for name in unknown}
                )
        return super().to_internal_value(data)


class IssueLicenseRequestSerializer(serializers.Serializer):
    """Serializer for admin license issuance."""

    email = serializers.EmailField(required=True)
    type = serializers.ChoiceField(
        choices=[t.value for t in LicenseType], required=False, default=LicenseType.BASIC.value
    )
    days = serializers.IntegerField(required=False, min_value=1, max_value=MAX_LICENSE_DAYS)
    features = FeatureOverridesSerializer(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class ListLicensesQuerySerializer(serializers.Serializer):
    """Serializer for license list query parameters."""

    status = serializers.ChoiceField(choices=[s.value for s in LicenseStatus], required=False)
    type = serializers.ChoiceField(choices=[t.value for t in LicenseType], required=False)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)


class RevokeLicenseRequestSerializer(serializers.Serializer):
    """Serializer for revoke license request."""

    reason = serializers.CharField(required=True, max_length=500)


class ExtendLicenseRequestSerializer(serializers.Serializer):
    """Serializer for extend license request."""

    days = serializers.IntegerField(required=True, min_value=1, max_value=MAX_LICENSE_DAYS)


class PaginationSerializer(serializers.Serializer):
    page = serializers.IntegerField()
    limit = serializers.IntegerField()
    total = serializers.IntegerField()
    pages = serializers.IntegerField()


class DashboardStatsSerializer(serializers.Serializer):
    """Serializer for DashboardStatsDTO."""

    licenses = serializers.DictField(child=serializers.IntegerField())
    activities = serializers.ListField(child=serializers.DictField())
    dailyActiveUsers = serializers.SerializerMethodField()

    def get_dailyActiveUsers(self, obj) -> list:
        return [
            {"date": day["date"], "activeUsers": day["active_users"]}
            for day in obj.daily_active_users
        ]
