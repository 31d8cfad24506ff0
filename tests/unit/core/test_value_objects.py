"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import (
    ActivityAction,
    ClientMetadata,
    Email,
    FeatureSet,
    LicenseStatus,
    Priority,
)


class TestEmail:
    """Tests for Email value object."""

    def test_valid_email(self):
        """Test valid email creation."""
        email = Email("test@example.com")
        assert str(email) == "test@example.com"
        assert email.value == "test@example.com"

    def test_email_normalized(self):
        assert Email("  Test@Example.COM ") == Email("test@example.com")

    def test_invalid_email_no_at(self):
        """Test invalid email without @."""
        with pytest.raises(ValueError, match="Invalid email"):
            Email("invalid-email")

    def test_invalid_email_empty(self):
        with pytest.raises(ValueError):
            Email("")


class TestLicenseStatus:
    """Tests for LicenseStatus enum."""

    def test_live_statuses(self):
        assert LicenseStatus.ACTIVE.is_live
        assert LicenseStatus.TRIAL.is_live
        assert not LicenseStatus.EXPIRED.is_live
        assert not LicenseStatus.REVOKED.is_live

    def test_str(self):
        assert str(LicenseStatus.TRIAL) == "trial"


class TestFeatureSet:
    """Tests for FeatureSet value object."""

    def test_round_trip_dict(self):
        features = FeatureSet(max_threads=100, custom_delays=True, advanced_mode=False, priority="high")
        assert features.priority is Priority.HIGH
        assert FeatureSet.from_dict(features.to_dict()) == features

    def test_negative_threads(self):
        with pytest.raises(ValueError):
            FeatureSet(max_threads=-1, custom_delays=True, advanced_mode=True, priority=Priority.NORMAL)

    @pytest.mark.parametrize("max_threads", ["abc", None, 1.7, True])
    def test_non_integer_threads(self, max_threads):
        with pytest.raises(ValueError):
            FeatureSet(
                max_threads=max_threads, custom_delays=True, advanced_mode=True, priority=Priority.NORMAL
            )

    def test_non_boolean_flag(self):
        with pytest.raises(ValueError):
            FeatureSet(max_threads=10, custom_delays="yes", advanced_mode=True, priority=Priority.NORMAL)

    def test_override_with_wrong_type(self):
        features = FeatureSet(max_threads=1, custom_delays=True, advanced_mode=True, priority=Priority.NORMAL)
        with pytest.raises(ValueError):
            features.with_overrides({"maxThreads": "abc"})

    def test_no_overrides_returns_same(self):
        features = FeatureSet(max_threads=1, custom_delays=True, advanced_mode=True, priority=Priority.NORMAL)
        assert features.with_overrides({}) is features


class TestClientMetadata:
    """Tests for ClientMetadata value object."""

    def test_defaults(self):
        client = ClientMetadata()
        assert client.ip is None
        assert client.user_agent is None
        assert client.client_version is None


def test_activity_actions():
    """Test the client-reported action vocabulary."""
    assert {action.value for action in ActivityAction} == {
        "license_activated",
        "license_checked",
        "license_deactivated",
        "threads_extracted",
        "posting_started",
        "posting_completed",
        "posting_stopped",
        "settings_updated",
        "error_occurred",
    }
