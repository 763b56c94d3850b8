"""Two commits racing for the last free room."""

from __future__ import annotations

import threading
from datetime import date, timedelta

from django.db import connection
from django.test import TransactionTestCase

from apps.bookings.application.command_handlers import commit_booking
from apps.bookings.domain.entities import BookingRequest, ContactDetails, RoomRequest
from apps.bookings.domain.pricing import GuestComposition
from apps.bookings.models import Booking, BookingRoom
from apps.rooms.services import seed_default_rooms
from shared.domain.errors import ConflictError
from shared.domain.value_objects import DateRange


class ConcurrentCommitTests(TransactionTestCase):
    def setUp(self) -> None:
        seed_default_rooms()
        self.start = date.today() + timedelta(days=20)

    def _request(self, name: str, offset: int = 0) -> BookingRequest:
        stay = DateRange(self.start + timedelta(days=offset), self.start + timedelta(days=offset + 2))
        return BookingRequest(
            rooms={"12": RoomRequest("12", stay, GuestComposition.from_counts(adults=1))},
            contact=ContactDetails(name=name, email=f"{name.lower()}@example.com"),
        )

    def _race(self, requests):
        barrier = threading.Barrier(len(requests))
        outcomes = []
        outcomes_lock = threading.Lock()

        def attempt(request: BookingRequest) -> None:
            try:
                barrier.wait()
                try:
                    result = commit_booking(request)
                    outcome = ("ok", result.booking.id)
                except ConflictError as exc:
                    outcome = ("conflict", exc.room_id)
                with outcomes_lock:
                    outcomes.append(outcome)
            finally:
                connection.close()

        threads = [threading.Thread(target=attempt, args=(request,)) for request in requests]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return outcomes

    def test_exactly_one_of_two_overlapping_commits_succeeds(self) -> None:
        outcomes = self._race([self._request("Alice"), self._request("Bob", offset=1)])

        self.assertEqual(sorted(kind for kind, _ in outcomes), ["conflict", "ok"])
        self.assertEqual(Booking.objects.count(), 1)
        self.assertEqual(BookingRoom.objects.filter(room_id="12").count(), 1)

    def test_back_to_back_commits_both_succeed(self) -> None:
        outcomes = self._race([self._request("Alice"), self._request("Bob", offset=2)])

        self.assertEqual([kind for kind, _ in outcomes], ["ok", "ok"])
        self.assertEqual(Booking.objects.count(), 2)
