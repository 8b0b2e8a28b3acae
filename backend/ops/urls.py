"""
Operations endpoints.

These endpoints skip authentication and should be reachable from the
internal network only in production.
"""
from django.urls import path

from ops.health import LivenessView, ReadinessView

urlpatterns = [
    path("live", LivenessView.as_view(), name="health-live"),
    path("ready", ReadinessView.as_view(), name="health-ready"),
]
