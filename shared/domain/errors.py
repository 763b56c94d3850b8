"""
Booking Error Taxonomy

Every failure of the booking engine is one of these. The API layer turns
them into structured JSON responses; the Unit of Work rolls back whenever
one escapes an atomic block.
"""

from datetime import date
from typing import Any, Dict, List, Optional


class BookingError(Exception):
    """Base class: carries a machine-readable code and a detail payload."""

    code = 'booking_error'
    status_code = 400

    def __init__(self, message: str, **detail: Any):
        super().__init__(message)
        self.message = message
        self.detail: Dict[str, Any] = detail

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {'error': self.code, 'detail': self.message}
        for key, value in self.detail.items():
            payload[key] = value.isoformat() if isinstance(value, date) else value
        return payload


class BookingValidationError(BookingError):
    """Malformed or out-of-range input, rejected before any transaction."""

    code = 'validation_error'
    status_code = 400


class ConflictError(BookingError):
    """A room is not free on a requested night (commit or hold creation)."""

    code = 'conflict'
    status_code = 409

    def __init__(
        self,
        message: str,
        *,
        room_id: str,
        date: date,
        conflicting_range: Optional[Any] = None,
    ):
        detail: Dict[str, Any] = {'room_id': room_id, 'date': date}
        if conflicting_range is not None:
            detail['conflicting_start'] = conflicting_range.start_date
            detail['conflicting_end'] = conflicting_range.end_date
        super().__init__(message, **detail)
        self.room_id = room_id
        self.date = date


class ForbiddenError(BookingError):
    """Edit or delete outside the allowed window, or with a bad credential."""

    code = 'forbidden'
    status_code = 403


class PolicyError(BookingError):
    """Seasonal access rule violated."""

    code = 'policy_violation'
    status_code = 403

    def __init__(self, message: str, *, reason: str, warnings: Optional[List[str]] = None):
        super().__init__(message, reason=reason)
        self.reason = reason
        self.warnings = warnings or []


class NotFoundError(BookingError):
    """Unknown booking, hold or blockage id."""

    code = 'not_found'
    status_code = 404
