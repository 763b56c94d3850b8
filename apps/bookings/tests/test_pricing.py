"""Unit tests for the price calculator."""

from __future__ import annotations

from datetime import date

from apps.bookings.domain.pricing import (
    GuestComposition,
    GuestEntry,
    PersonType,
    RoomStay,
    calculate_bulk_price,
    calculate_standard_price,
    distribute_guests,
)
from apps.configuration.domain import (
    DEFAULT_BULK_PRICES,
    DEFAULT_PRICES,
    BulkPriceTable,
    GuestType,
    PriceTable,
    RoomSize,
)
from shared.domain.value_objects import DateRange

PRICES = PriceTable.from_dict(DEFAULT_PRICES)
BULK_PRICES = BulkPriceTable(**DEFAULT_BULK_PRICES)


def _stay(room_id: str, size: RoomSize, nights: int, guests: GuestComposition, tier=GuestType.EXTERNAL) -> RoomStay:
    start = date(2025, 6, 1)
    return RoomStay(
        room_id=room_id,
        size=size,
        date_range=DateRange(start, date(2025, 6, 1 + nights)),
        guests=guests,
        guest_type=tier,
    )


def test_small_room_discounted_adult_and_child() -> None:
    guests = GuestComposition.from_counts(adults=1, children=1, guest_type=GuestType.UTIA)
    stay = _stay("12", RoomSize.SMALL, 2, guests, GuestType.UTIA)

    assert calculate_standard_price([stay], PRICES) == (300 + 25) * 2


def test_toddlers_are_free() -> None:
    with_toddlers = GuestComposition.from_counts(adults=2, toddlers=2)
    without = GuestComposition.from_counts(adults=2)

    assert calculate_standard_price([_stay("14", RoomSize.LARGE, 1, with_toddlers)], PRICES) == \
        calculate_standard_price([_stay("14", RoomSize.LARGE, 1, without)], PRICES)
    assert with_toddlers.capacity_count == 2


def test_mixed_tiers_in_one_room_use_each_guest_rate() -> None:
    guests = GuestComposition(
        (
            GuestEntry(PersonType.ADULT, GuestType.UTIA),
            GuestEntry(PersonType.ADULT, GuestType.EXTERNAL),
            GuestEntry(PersonType.CHILD, GuestType.EXTERNAL),
        )
    )

    price = calculate_standard_price([_stay("13", RoomSize.SMALL, 1, guests)], PRICES)

    assert price == 300 + 100 + 50


def test_empty_room_costs_its_base_rate() -> None:
    stay = _stay("24", RoomSize.LARGE, 3, GuestComposition())

    assert calculate_standard_price([stay], PRICES) == 600 * 3


def test_rooms_with_own_date_ranges_are_priced_separately() -> None:
    first = _stay("12", RoomSize.SMALL, 2, GuestComposition.from_counts(adults=2))
    second = _stay("44", RoomSize.LARGE, 4, GuestComposition.from_counts(adults=1))

    assert calculate_standard_price([first, second], PRICES) == (500 + 100) * 2 + 600 * 4


def test_distribute_guests_gives_each_room_one_adult() -> None:
    composition = GuestComposition.from_counts(adults=3, children=2)

    spread = distribute_guests(["12", "13"], composition)

    assert spread["12"].adults == 2
    assert spread["12"].children == 2
    assert spread["13"].adults == 1
    assert spread["13"].children == 0


def test_bulk_price_example() -> None:
    guests = GuestComposition.from_counts(adults=12, guest_type=GuestType.EXTERNAL)

    quote = calculate_bulk_price(guests, 3, BULK_PRICES)

    assert quote.total == (2000 + 12 * 250) * 3 == 15000
    assert quote.subtotals["external_adults"] == 12 * 250 * 3
    assert quote.subtotals["base"] == 2000 * 3


def test_bulk_price_mixed_tiers() -> None:
    guests = GuestComposition.from_counts(adults=4, children=2, guest_type=GuestType.UTIA) + \
        GuestComposition.from_counts(adults=6, children=1, guest_type=GuestType.EXTERNAL)

    quote = calculate_bulk_price(guests, 2, BULK_PRICES)

    assert quote.nightly == 2000 + 4 * 100 + 2 * 0 + 6 * 250 + 1 * 50
    assert quote.total == quote.nightly * 2


def test_with_guest_type_moves_every_guest_to_one_tier() -> None:
    mixed = GuestComposition(
        (
            GuestEntry(PersonType.ADULT, GuestType.EXTERNAL, first_name="Jan"),
            GuestEntry(PersonType.CHILD, GuestType.UTIA),
        )
    )

    retiered = mixed.with_guest_type(GuestType.UTIA)

    assert {guest.guest_type for guest in retiered.guests} == {GuestType.UTIA}
    assert retiered.guests[0].first_name == "Jan"
    # 300 base + 25 child, two nights
    assert calculate_standard_price([_stay("12", RoomSize.SMALL, 2, retiered)], PRICES) == (300 + 25) * 2
