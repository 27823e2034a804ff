from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.utils.cache import patch_vary_headers

from apps.core.observability import METRICS

LOGGER = logging.getLogger("donation_tracker")

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self'; img-src 'self' data: https:"
)
CORS_ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOWED_HEADERS = "Content-Type, Authorization, X-Request-ID"


class RequestIdMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = str(request.headers.get("X-Request-ID") or uuid.uuid4())
        request.request_id = request_id
        response = self.get_response(request)
        response["X-Request-ID"] = request_id
        return response


class StructuredRequestLogMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        start = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        METRICS.observe_http(request.path, request.method, response.status_code, elapsed_ms)
        request_id = getattr(request, "request_id", "")
        LOGGER.info(
            "request_completed method=%s path=%s status=%s elapsed_ms=%.2f request_id=%s ip=%s",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
            request_id,
            request.META.get("REMOTE_ADDR", ""),
        )
        return response


class SecurityHeadersMiddleware:
    """Browser-facing hardening headers plus CORS for the configured origin."""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
            response = HttpResponse(status=204)
        else:
            response = self.get_response(request)

        response.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        response.setdefault("X-Content-Type-Options", "nosniff")
        response.setdefault("Referrer-Policy", "no-referrer")

        allowed_origin = settings.CORS_ALLOWED_ORIGIN
        origin = request.headers.get("Origin", "")
        if allowed_origin and origin == allowed_origin:
            response["Access-Control-Allow-Origin"] = allowed_origin
            response["Access-Control-Allow-Credentials"] = "true"
            response["Access-Control-Allow-Methods"] = CORS_ALLOWED_METHODS
            response["Access-Control-Allow-Headers"] = CORS_ALLOWED_HEADERS
            patch_vary_headers(response, ("Origin",))
        return response
