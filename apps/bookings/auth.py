"""
Authorization context for booking mutations.

Resolved once per request and passed explicitly to the command handlers:

    AuthContext = Admin(user) | ServiceKey() | Anonymous(edit_token)
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Any, Optional, Union

from django.conf import settings  # type: ignore

EDIT_TOKEN_HEADER = "HTTP_X_EDIT_TOKEN"
API_KEY_HEADER = "HTTP_X_API_KEY"


@dataclass(frozen=True)
class Admin:
    user: Any

    is_privileged = True


@dataclass(frozen=True)
class ServiceKey:
    """Trusted backend caller identified by the shared API key."""

    is_privileged = True


@dataclass(frozen=True)
class Anonymous:
    edit_token: Optional[str] = None

    is_privileged = False

    def owns(self, booking) -> bool:
        """Constant-time comparison of the supplied token with the booking's."""
        if not self.edit_token or not booking.edit_token:
            return False
        return hmac.compare_digest(str(self.edit_token), str(booking.edit_token))


AuthContext = Union[Admin, ServiceKey, Anonymous]


def _valid_service_key(supplied: Optional[str]) -> bool:
    expected = getattr(settings, "BOOKING_SERVICE_API_KEY", "")
    if not expected or not supplied:
        return False
    return hmac.compare_digest(str(supplied), str(expected))


def resolve_auth_context(request) -> AuthContext:
    """Staff user, then API key, then the edit token of an anonymous guest."""
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated and user.is_staff:
        return Admin(user)

    if _valid_service_key(request.META.get(API_KEY_HEADER)):
        return ServiceKey()

    token = request.META.get(EDIT_TOKEN_HEADER)
    if not token:
        params = getattr(request, "query_params", request.GET)
        token = params.get("token")
    return Anonymous(edit_token=token or None)
