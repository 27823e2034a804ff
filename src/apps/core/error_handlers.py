from __future__ import annotations

import logging
import traceback
from collections.abc import Callable

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse

from apps.core.contracts.errors import ApiErrorPayload

LOGGER = logging.getLogger("donation_tracker")


class UnifiedErrorMiddleware:
    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> JsonResponse:
        request_id = str(getattr(request, "request_id", ""))
        LOGGER.error(
            "request_failed request_id=%s method=%s path=%s error=%s",
            request_id,
            request.method,
            request.path,
            type(exception).__name__,
            exc_info=exception,
        )
        details: tuple[str, ...] = ()
        if settings.DEBUG:
            details = (
                f"{type(exception).__name__}: {exception}",
                *traceback.format_exception(exception),
            )
        payload = ApiErrorPayload(
            code="internal_error",
            message="An internal error occurred.",
            request_id=request_id,
            details=details,
        )
        return JsonResponse(payload.to_dict(), status=500)
