"""
URL configuration for client License API endpoints.
"""

from django.urls import path

from api.v1.license import views

app_name = "license"

urlpatterns = [
    path("validate", views.ValidateLicenseView.as_view(), name="validate"),
    path("check", views.CheckLicenseView.as_view(), name="check"),
    path("info", views.LicenseInfoView.as_view(), name="info"),
]
