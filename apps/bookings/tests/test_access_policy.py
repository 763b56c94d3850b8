"""Unit tests for the seasonal access policy."""

from __future__ import annotations

from datetime import date

import pytest

from apps.bookings.domain.access_policy import TWO_ROOMS_WARNING, PolicyState, check_access, policy_state
from apps.configuration.domain import BookingSettings, GuestType, RestrictionPeriod
from shared.domain.errors import PolicyError
from shared.domain.value_objects import DateRange

PERIOD = RestrictionPeriod(
    period_id="XMAS2025",
    start_date=date(2025, 12, 23),
    end_date=date(2026, 1, 2),
    year=2025,
)
BEFORE_CUTOFF = date(2025, 9, 15)
AFTER_CUTOFF = date(2025, 10, 1)
CHRISTMAS = DateRange(date(2025, 12, 24), date(2025, 12, 27))


@pytest.fixture
def booking_settings() -> BookingSettings:
    defaults = BookingSettings.defaults(bulk_max_guests=26)
    return BookingSettings(
        prices=defaults.prices,
        bulk_prices=defaults.bulk_prices,
        bulk_max_guests=26,
        restriction_periods=(PERIOD,),
        access_codes=frozenset({"VANOCE2025"}),
    )


def _check(booking_settings, *, today=BEFORE_CUTOFF, stay=CHRISTMAS, guest_type=GuestType.EXTERNAL,
           rooms_count=1, is_bulk=False, access_code=None):
    return check_access(
        booking_settings,
        stay,
        today=today,
        guest_type=guest_type,
        rooms_count=rooms_count,
        is_bulk=is_bulk,
        access_code=access_code,
    )


def test_cutoff_day_itself_is_before_cutoff() -> None:
    assert policy_state(PERIOD, date(2025, 9, 30)) is PolicyState.BEFORE_CUTOFF
    assert policy_state(PERIOD, date(2025, 10, 1)) is PolicyState.AFTER_CUTOFF


def test_stay_outside_period_is_unrestricted(booking_settings) -> None:
    decision = _check(booking_settings, stay=DateRange(date(2025, 12, 1), date(2025, 12, 5)))

    assert decision.restricted is False
    assert decision.warnings == []


def test_stay_ending_on_first_restricted_day_still_counts(booking_settings) -> None:
    with pytest.raises(PolicyError) as excinfo:
        _check(booking_settings, stay=DateRange(date(2025, 12, 20), date(2025, 12, 23)))

    assert excinfo.value.reason == "code_required"


def test_before_cutoff_requires_code(booking_settings) -> None:
    with pytest.raises(PolicyError) as excinfo:
        _check(booking_settings)
    assert excinfo.value.reason == "code_required"

    with pytest.raises(PolicyError) as excinfo:
        _check(booking_settings, access_code="WRONG")
    assert excinfo.value.reason == "code_invalid"

    decision = _check(booking_settings, access_code="VANOCE2025")
    assert decision.code_required is True
    assert decision.state is PolicyState.BEFORE_CUTOFF


def test_before_cutoff_discounted_room_limit(booking_settings) -> None:
    one = _check(booking_settings, guest_type=GuestType.UTIA, rooms_count=1, access_code="VANOCE2025")
    two = _check(booking_settings, guest_type=GuestType.UTIA, rooms_count=2, access_code="VANOCE2025")

    assert one.warnings == []
    assert two.warnings == [TWO_ROOMS_WARNING]
    with pytest.raises(PolicyError) as excinfo:
        _check(booking_settings, guest_type=GuestType.UTIA, rooms_count=3, access_code="VANOCE2025")
    assert excinfo.value.reason == "room_limit"


def test_external_guests_have_no_room_limit(booking_settings) -> None:
    decision = _check(booking_settings, rooms_count=5, access_code="VANOCE2025")

    assert decision.warnings == []


def test_before_cutoff_bulk_needs_code(booking_settings) -> None:
    with pytest.raises(PolicyError):
        _check(booking_settings, is_bulk=True, rooms_count=9)

    assert _check(booking_settings, is_bulk=True, rooms_count=9, access_code="VANOCE2025").restricted


def test_after_cutoff_standard_needs_no_code(booking_settings) -> None:
    decision = _check(booking_settings, today=AFTER_CUTOFF, guest_type=GuestType.UTIA, rooms_count=4)

    assert decision.state is PolicyState.AFTER_CUTOFF
    assert decision.code_required is False


def test_after_cutoff_bulk_is_blocked(booking_settings) -> None:
    with pytest.raises(PolicyError) as excinfo:
        _check(booking_settings, today=AFTER_CUTOFF, is_bulk=True, rooms_count=9, access_code="VANOCE2025")

    assert excinfo.value.reason == "bulk_blocked"
