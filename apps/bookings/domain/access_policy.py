"""
Seasonal Access Policy

Booking into a restricted (Christmas) period depends on the booking day
relative to the period's cutoff, 30 September of its year:

Before or on the cutoff:
    - an access code is required for standard and bulk bookings
    - discounted (ÚTIA) guests: 1 room, 2 rooms with a warning, 3+ rejected
    - external guests need only the code
After the cutoff:
    - standard bookings need no code
    - bulk bookings are rejected
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from apps.configuration.domain import BookingSettings, GuestType, RestrictionPeriod
from shared.domain.errors import PolicyError
from shared.domain.value_objects import DateRange


class PolicyState(str, Enum):
    BEFORE_CUTOFF = 'before_cutoff'
    AFTER_CUTOFF = 'after_cutoff'


TWO_ROOMS_WARNING = (
    "Dvě pokoje pro zaměstnance ÚTIA ve vánočním období jsou povoleny "
    "pouze pro ubytování vlastní rodiny."
)


@dataclass(frozen=True)
class AccessDecision:
    period: Optional[RestrictionPeriod] = None
    state: Optional[PolicyState] = None
    code_required: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def restricted(self) -> bool:
        return self.period is not None


def policy_state(period: RestrictionPeriod, today: date) -> PolicyState:
    if today <= period.cutoff:
        return PolicyState.BEFORE_CUTOFF
    return PolicyState.AFTER_CUTOFF


def check_access(
    settings: BookingSettings,
    stay: DateRange,
    *,
    today: date,
    guest_type: GuestType,
    rooms_count: int,
    is_bulk: bool = False,
    access_code: Optional[str] = None,
) -> AccessDecision:
    """Apply the seasonal rules to one reservation; raises PolicyError on violation."""
    period = settings.restriction_for(stay)
    if period is None:
        return AccessDecision()

    state = policy_state(period, today)

    if state is PolicyState.AFTER_CUTOFF:
        if is_bulk:
            raise PolicyError(
                "Hromadné rezervace celé chaty nejsou ve vánočním období po uzávěrce možné",
                reason='bulk_blocked',
            )
        return AccessDecision(period=period, state=state)

    if not settings.is_valid_access_code(access_code):
        reason = 'code_invalid' if access_code else 'code_required'
        raise PolicyError(
            "Rezervace ve vánočním období vyžaduje platný přístupový kód",
            reason=reason,
        )

    warnings: List[str] = []
    if not is_bulk and GuestType(guest_type) is GuestType.UTIA:
        if rooms_count >= 3:
            raise PolicyError(
                "Zaměstnanci ÚTIA mohou ve vánočním období rezervovat nejvýše dva pokoje",
                reason='room_limit',
            )
        if rooms_count == 2:
            warnings.append(TWO_ROOMS_WARNING)

    return AccessDecision(period=period, state=state, code_required=True, warnings=warnings)
