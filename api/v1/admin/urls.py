"""
URL configuration for Admin API endpoints.
"""

from django.urls import path

from api.v1.admin import views

app_name = "admin_api"

urlpatterns = [
    path("licenses", views.LicenseCollectionView.as_view(), name="licenses"),
    path("licenses/active", views.ActiveLicensesView.as_view(), name="licenses-active"),
    path(
        "licenses/<str:license_key>/revoke",
        views.RevokeLicenseView.as_view(),
        name="license-revoke",
    ),
    path(
        "licenses/<str:license_key>/reactivate",
        views.ReactivateLicenseView.as_view(),
        name="license-reactivate",
    ),
    path(
        "licenses/<str:license_key>/extend",
        views.ExtendLicenseView.as_view(),
        name="license-extend",
    ),
    path("dashboard/stats", views.DashboardStatsView.as_view(), name="dashboard-stats"),
]
