"""
Seasonal access-code validation with a per-client attempt limit.

Only failed attempts are counted, through django-ratelimit's cache
counters (Redis in production), so the limit holds across worker
processes. A valid code moves the client to a fresh counter generation.
"""

from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings  # type: ignore
from django.core.cache import cache  # type: ignore
from django_ratelimit import ALL  # type: ignore
from django_ratelimit.core import get_usage  # type: ignore

from apps.configuration.domain import BookingSettings
from shared.domain.errors import PolicyError

logger = logging.getLogger(__name__)


def client_address(request) -> str:  # type: ignore
    """Extract client IP from request."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        ip = x_forwarded_for.split(",")[0].strip()
    else:
        ip = request.META.get("REMOTE_ADDR", "")
    return ip or "unknown"


def _generation_key(address: str) -> str:
    return f"bookings.access_code.generation:{address}"


def _client_key(group: str, request) -> str:  # type: ignore
    address = client_address(request)
    return f"{address}:{cache.get(_generation_key(address), 0)}"


class AccessCodeRateLimiter:
    """Bounded failed attempts per client address within a time window."""

    group = "bookings.access_code"

    def __init__(self, max_attempts: Optional[int] = None, window_seconds: Optional[int] = None):
        self.max_attempts = max_attempts or getattr(settings, "BOOKING_ACCESS_CODE_MAX_ATTEMPTS", 10)
        self.window_seconds = window_seconds or getattr(settings, "BOOKING_ACCESS_CODE_WINDOW_SECONDS", 900)

    @property
    def rate(self) -> str:
        return f"{self.max_attempts}/{self.window_seconds}s"

    def _usage(self, request, increment: bool) -> Optional[dict]:  # type: ignore
        return get_usage(
            request,
            group=self.group,
            key=_client_key,
            rate=self.rate,
            method=ALL,
            increment=increment,
        )

    def attempts(self, request) -> int:  # type: ignore
        usage = self._usage(request, increment=False)
        # None when RATELIMIT_ENABLE is off
        return usage["count"] if usage else 0

    def is_blocked(self, request) -> bool:  # type: ignore
        return self.attempts(request) >= self.max_attempts

    def register_failure(self, request) -> int:  # type: ignore
        usage = self._usage(request, increment=True)
        return usage["count"] if usage else 0

    def reset(self, request) -> None:  # type: ignore
        key = _generation_key(client_address(request))
        cache.set(key, cache.get(key, 0) + 1, timeout=2 * self.window_seconds)

    def ensure_allowed(self, request) -> None:  # type: ignore
        if self.is_blocked(request):
            logger.warning(f"Access code attempts exhausted for client {client_address(request)}")
            raise PolicyError(
                "Příliš mnoho pokusů o zadání přístupového kódu, zkuste to později",
                reason="rate_limited",
            )


access_code_limiter = AccessCodeRateLimiter()


def validate_access_code(
    code: Optional[str],
    request,  # type: ignore
    booking_settings: BookingSettings,
    limiter: Optional[AccessCodeRateLimiter] = None,
) -> bool:
    """Check a code against the configured list, counting failures per client."""
    limiter = limiter or access_code_limiter
    limiter.ensure_allowed(request)
    if booking_settings.is_valid_access_code(code):
        limiter.reset(request)
        return True
    attempts = limiter.register_failure(request)
    logger.info(f"Invalid access code attempt {attempts}/{limiter.max_attempts}")
    return False
