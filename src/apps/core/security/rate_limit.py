from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache, wraps

from django.conf import settings
from django.http import HttpRequest, HttpResponse

from apps.core.responses import api_error

LOGGER = logging.getLogger("donation_tracker")


def _sanitize_key(value: str, *, max_len: int = 512) -> str:
    text = str(value or "").strip()
    if not text or len(text) > max_len:
        return ""
    if any(ch in text for ch in ("\r", "\n", "\t", "\x00")):
        return ""
    return text


def request_rate_limit_key(request: HttpRequest) -> str:
    client_host = str(request.META.get("REMOTE_ADDR", "")).strip()
    if client_host:
        return f"ip:{client_host}"
    return "ip:unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows of ``window_seconds``.

    A window opens on the first request for a key and every request inside it
    counts against ``max_requests``; the count resets when the window expires.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: int,
        max_keys: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max(1, int(max_requests))
        self._window_seconds = max(1, int(window_seconds))
        self._max_keys = max(128, int(max_keys))
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[float, int]] = {}

    def allow(self, key: str) -> RateLimitDecision:
        normalized_key = _sanitize_key(key) or "anonymous"
        now = self._clock()
        with self._lock:
            started_at, count = self._windows.get(normalized_key, (now, 0))
            if now - started_at >= self._window_seconds:
                started_at, count = now, 0

            reset_after = max(1, math.ceil(started_at + self._window_seconds - now))
            if count >= self._max_requests:
                return RateLimitDecision(False, self._max_requests, 0, reset_after)

            count += 1
            self._windows[normalized_key] = (started_at, count)
            self._trim_locked(now)
            return RateLimitDecision(True, self._max_requests, self._max_requests - count, reset_after)

    def _trim_locked(self, now: float) -> None:
        if len(self._windows) <= self._max_keys:
            return
        expired = [key for key, (started_at, _) in self._windows.items() if now - started_at >= self._window_seconds]
        for key in expired:
            self._windows.pop(key, None)
        while len(self._windows) > self._max_keys:
            oldest_key = min(self._windows, key=lambda item: self._windows[item][0])
            self._windows.pop(oldest_key, None)


@lru_cache(maxsize=8)
def get_rate_limiter(scope: str, max_requests: int, window_seconds: int) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(max_requests=max_requests, window_seconds=window_seconds)


def _apply_headers(response: HttpResponse, decision: RateLimitDecision) -> HttpResponse:
    response["RateLimit-Limit"] = str(decision.limit)
    response["RateLimit-Remaining"] = str(decision.remaining)
    response["RateLimit-Reset"] = str(decision.reset_after)
    return response


def rate_limited(scope: str, *, message: str) -> Callable[[Callable[..., HttpResponse]], Callable[..., HttpResponse]]:
    def decorator(view: Callable[..., HttpResponse]) -> Callable[..., HttpResponse]:
        @wraps(view)
        def wrapper(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            if not settings.RATE_LIMIT_ENABLED:
                return view(request, *args, **kwargs)

            window_seconds = int(settings.RATE_LIMIT_WINDOW_SECONDS)
            limiter = get_rate_limiter(scope, int(settings.RATE_LIMIT_MAX), window_seconds)
            decision = limiter.allow(request_rate_limit_key(request))
            if not decision.allowed:
                LOGGER.warning(
                    "rate_limit_blocked scope=%s path=%s key=%s window_sec=%s max_requests=%s retry_after=%s",
                    scope,
                    request.path,
                    request_rate_limit_key(request),
                    window_seconds,
                    decision.limit,
                    decision.reset_after,
                )
                response = api_error(
                    request,
                    code="too_many_requests",
                    message=message,
                    status=429,
                    details=(f"retry_after={decision.reset_after}",),
                )
                response["Retry-After"] = str(decision.reset_after)
                return _apply_headers(response, decision)
            return _apply_headers(view(request, *args, **kwargs), decision)

        return wrapper

    return decorator
