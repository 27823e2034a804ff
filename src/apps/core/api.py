from __future__ import annotations

import json

from django.conf import settings as django_settings
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from apps.core.config.env import get_runtime_settings, validate_runtime_settings
from apps.core.observability import METRICS
from apps.donations.store import EntityStore

SERVICE_NAME = "donation-tracker"


@require_http_methods(["GET"])
def service_index(request: HttpRequest) -> JsonResponse:
    prefix = f"/api/{django_settings.API_VERSION}"
    return JsonResponse(
        {
            "service": SERVICE_NAME,
            "version": django_settings.API_VERSION,
            "env": django_settings.RUNTIME_ENV,
            "endpoints": {
                "health": "/health",
                "projects": f"{prefix}/projects",
                "project": f"{prefix}/projects/<id>",
                "projectDonations": f"{prefix}/projects/<id>/donations",
                "donate": f"{prefix}/donate",
                "donations": f"{prefix}/donations",
                "donationStats": f"{prefix}/donations/stats",
                "metrics": f"{prefix}/metrics",
            },
        }
    )


@require_http_methods(["GET"])
def health_live(request: HttpRequest) -> JsonResponse:
    return JsonResponse({"ok": True, "service": SERVICE_NAME, "status": "live"})


def _readiness_payload() -> tuple[dict[str, object], int]:
    runtime = get_runtime_settings()
    config_issues = validate_runtime_settings(runtime)
    db_ok = EntityStore().ping()
    status = 200 if db_ok else 503
    return (
        {
            "ok": db_ok,
            "service": SERVICE_NAME,
            "status": "ready" if db_ok else "not_ready",
            "database": "connected" if db_ok else "unavailable",
            "db_profile": runtime.db_profile,
            "env": runtime.env,
            "config_issues": config_issues,
        },
        status,
    )


@require_http_methods(["GET"])
def health_ready(request: HttpRequest) -> JsonResponse:
    payload, status = _readiness_payload()
    return JsonResponse(payload, status=status)


@require_http_methods(["GET"])
def health(request: HttpRequest) -> JsonResponse:
    ready = health_ready(request)
    payload = json.loads(ready.content.decode("utf-8"))
    payload["status"] = "healthy" if payload.get("ok") else "degraded"
    return JsonResponse(payload, status=ready.status_code)


@require_http_methods(["GET"])
def metrics_payload(request: HttpRequest) -> HttpResponse:
    return HttpResponse(
        METRICS.render_prometheus(),
        content_type="text/plain; version=0.0.4; charset=utf-8",
        status=200,
    )
