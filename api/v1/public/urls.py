"""
URL configuration for Public API endpoints.
"""

from django.urls import path

from api.v1.public import views

app_name = "public"

urlpatterns = [
    path("create-license", views.CreateLicenseView.as_view(), name="create-license"),
    path("license-types", views.LicenseTypesView.as_view(), name="license-types"),
]
