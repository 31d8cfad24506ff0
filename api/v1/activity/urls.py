"""
URL configuration for Activity API endpoints.
"""

from django.urls import path

from api.v1.activity import views

app_name = "activity"

urlpatterns = [
    path("log", views.LogActivityView.as_view(), name="log"),
    path("stats", views.UserStatsView.as_view(), name="stats"),
    path("summary", views.ActivitySummaryView.as_view(), name="summary"),
]
