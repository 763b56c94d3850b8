"""
Night-based Occupancy Model

Pure functions, no database access. A room's calendar is a set of
occupancies (blockages, committed bookings, holds); every query is
answered in terms of nights:

- night D runs from day D to day D+1
- a stay [start, end) occupies nights start..end-1, so the checkout day is
  free for the next guest
- a day's status comes from its two adjacent nights: the one ending on
  the day (D-1) and the one starting on it (D)

Night resolution precedence: blocked > confirmed > proposed. Holds
(proposed) owned by the asking session are invisible to it.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional, Tuple

from shared.domain.value_objects import DateRange


class NightType(str, Enum):
    AVAILABLE = 'available'
    PROPOSED = 'proposed'      # held by another session
    CONFIRMED = 'confirmed'    # committed booking
    BLOCKED = 'blocked'        # admin blockage


class DayStatus(str, Enum):
    AVAILABLE = 'available'
    EDGE = 'edge'
    OCCUPIED = 'occupied'
    PROPOSED = 'proposed'
    BLOCKED = 'blocked'


_PRECEDENCE = {
    NightType.AVAILABLE: 0,
    NightType.PROPOSED: 1,
    NightType.CONFIRMED: 2,
    NightType.BLOCKED: 3,
}


@dataclass(frozen=True)
class Occupancy:
    """One thing occupying a room over a range of nights"""
    date_range: DateRange
    kind: NightType
    source_id: str
    session_id: Optional[str] = None

    def visible_to(self, session_id: Optional[str]) -> bool:
        """Holds never block the session that owns them"""
        if self.kind is not NightType.PROPOSED:
            return True
        return session_id is None or self.session_id != session_id


@dataclass(frozen=True)
class DayAvailability:
    status: DayStatus
    night_before: NightType
    night_after: NightType
    mixed: bool = False

    def to_dict(self) -> dict:
        return {
            'status': self.status.value,
            'night_before': self.night_before.value,
            'night_after': self.night_after.value,
            'mixed': self.mixed,
        }


def resolve_night(
    night: date,
    occupancies: Iterable[Occupancy],
    exclude_session_id: Optional[str] = None,
) -> Tuple[NightType, Optional[Occupancy]]:
    """Strongest occupancy of one night and the record responsible for it"""
    best = NightType.AVAILABLE
    source = None
    for occupancy in occupancies:
        if not occupancy.date_range.contains_night(night):
            continue
        if not occupancy.visible_to(exclude_session_id):
            continue
        if _PRECEDENCE[occupancy.kind] > _PRECEDENCE[best]:
            best, source = occupancy.kind, occupancy
    return best, source


def day_status(
    day: date,
    occupancies: Iterable[Occupancy],
    exclude_session_id: Optional[str] = None,
) -> DayAvailability:
    """
    Status of a calendar day from its two adjacent nights

    - blocked: the night starting on the day is blocked (a blockage covers the day)
    - available: neither night occupied
    - edge: exactly one night occupied, a stay can still start or end here
    - occupied: both nights taken by bookings or blockages
    - proposed: both nights only held by other sessions
    - edge + mixed: one night held, the other committed
    """
    occupancies = list(occupancies)
    before, _ = resolve_night(day - timedelta(days=1), occupancies, exclude_session_id)
    after, _ = resolve_night(day, occupancies, exclude_session_id)

    if after is NightType.BLOCKED:
        return DayAvailability(DayStatus.BLOCKED, before, after)

    taken = [night for night in (before, after) if night is not NightType.AVAILABLE]
    if not taken:
        return DayAvailability(DayStatus.AVAILABLE, before, after)
    if len(taken) == 1:
        return DayAvailability(DayStatus.EDGE, before, after)

    held = [night is NightType.PROPOSED for night in taken]
    if all(held):
        return DayAvailability(DayStatus.PROPOSED, before, after)
    if any(held):
        return DayAvailability(DayStatus.EDGE, before, after, mixed=True)
    return DayAvailability(DayStatus.OCCUPIED, before, after)


def first_conflict(
    stay: DateRange,
    occupancies: Iterable[Occupancy],
    exclude_session_id: Optional[str] = None,
) -> Optional[Tuple[date, Occupancy]]:
    """
    First night of the stay that is not free, with the occupancy holding it

    A stay is acceptable only when every night it occupies is free. The
    checkout day itself is never checked, which is what permits
    back-to-back stays.
    """
    relevant = [
        occupancy for occupancy in occupancies
        if occupancy.date_range.overlaps_with(stay) and occupancy.visible_to(exclude_session_id)
    ]
    if not relevant:
        return None
    for night in stay.nights():
        kind, source = resolve_night(night, relevant, exclude_session_id)
        if kind is not NightType.AVAILABLE:
            return night, source
    return None
