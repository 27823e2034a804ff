from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.urls import include, path

from apps.core import api as core_api

API_PREFIX = f"api/{settings.API_VERSION}/"

urlpatterns = [
    path("", core_api.service_index, name="home"),
    path("health", core_api.health, name="health"),
    path("health/live", core_api.health_live, name="health-live"),
    path("health/ready", core_api.health_ready, name="health-ready"),
    path(f"{API_PREFIX}metrics", core_api.metrics_payload, name="api-metrics"),
    path(API_PREFIX, include("apps.projects.urls")),
    path(API_PREFIX, include("apps.donations.urls")),
    path("django-admin/", admin.site.urls),
]
