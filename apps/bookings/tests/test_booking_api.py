"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking, BookingGuest, BookingRoom, ProposedBooking
from apps.bookings.services.access_codes import access_code_limiter
from apps.configuration.models import AccessCode, SeasonalRestrictionPeriod
from apps.rooms.services import create_blockage, seed_default_rooms


class BookingAPITestCase(APITestCase):
    def setUp(self) -> None:
        cache.clear()
        seed_default_rooms()
        self.admin = get_user_model().objects.create_user(
            username="spravce",
            email="spravce@example.com",
            password="AdminPass123",
            is_staff=True,
        )
        self.list_url = reverse("booking-list")
        self.start = date.today() + timedelta(days=30)

    def _payload(self, room_ids=("12",), nights: int = 2, start: date | None = None, **extra) -> dict:
        start = start or self.start
        payload = {
            "name": "Jan Novák",
            "email": "jan.novak@example.com",
            "phone": "+420123456789",
            "guest_type": "external",
            "room_ids": list(room_ids),
            "start_date": str(start),
            "end_date": str(start + timedelta(days=nights)),
            "adults": 2,
        }
        payload.update(extra)
        return payload

    def _create(self, **kwargs) -> dict:
        response = self.client.post(self.list_url, self._payload(**kwargs), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data

    def _detail_url(self, booking_id: str) -> str:
        return reverse("booking-detail", args=[booking_id])


class BookingCreateTests(BookingAPITestCase):
    """Vytvoření rezervace, konflikty a ceny."""

    def test_guest_can_create_booking(self) -> None:
        data = self._create()

        self.assertIn("edit_token", data)
        self.assertEqual(data["warnings"], [])
        booking = Booking.objects.get(pk=data["id"])
        self.assertEqual(booking.room_ids, ["12"])
        self.assertEqual(booking.adults, 2)
        self.assertEqual(booking.total_price, (500 + 100) * 2)
        self.assertFalse(booking.paid)

    def test_prevent_double_booking_on_overlap(self) -> None:
        self._create(nights=3)

        response = self.client.post(
            self.list_url,
            self._payload(start=self.start + timedelta(days=1), nights=3),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["error"], "conflict")
        self.assertEqual(response.data["room_id"], "12")
        self.assertEqual(response.data["date"], str(self.start + timedelta(days=1)))
        self.assertEqual(Booking.objects.count(), 1)

    def test_back_to_back_bookings_both_succeed(self) -> None:
        self._create(nights=3)
        self._create(start=self.start + timedelta(days=3), nights=2)

        self.assertEqual(BookingRoom.objects.filter(room_id="12").count(), 2)

    def test_conflict_on_one_room_writes_nothing(self) -> None:
        self._create(room_ids=("13",))

        response = self.client.post(self.list_url, self._payload(room_ids=("12", "13")), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(Booking.objects.count(), 1)
        self.assertFalse(BookingRoom.objects.filter(room_id="12").exists())

    def test_blocked_room_cannot_be_booked(self) -> None:
        create_blockage(self.start, self.start, room_ids=["12"])

        response = self.client.post(self.list_url, self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_per_room_ranges_and_guests(self) -> None:
        payload = self._payload()
        del payload["room_ids"], payload["start_date"], payload["end_date"], payload["adults"]
        payload["rooms"] = [
            {
                "room_id": "12",
                "start_date": str(self.start),
                "end_date": str(self.start + timedelta(days=2)),
                "guests": [
                    {"person_type": "adult", "first_name": "Jan", "last_name": "Novák"},
                    {"person_type": "child", "first_name": "Eva", "last_name": "Nováková"},
                ],
            },
            {
                "room_id": "14",
                "start_date": str(self.start + timedelta(days=1)),
                "end_date": str(self.start + timedelta(days=4)),
                "adults": 1,
                "toddlers": 1,
            },
        ]

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get(pk=response.data["id"])
        self.assertEqual(booking.start_date, self.start)
        self.assertEqual(booking.end_date, self.start + timedelta(days=4))
        self.assertEqual((booking.adults, booking.children, booking.toddlers), (2, 1, 1))
        self.assertEqual(booking.total_price, (500 + 50) * 2 + 600 * 3)
        self.assertEqual(BookingGuest.objects.filter(booking=booking).count(), 4)

    def test_capacity_is_enforced(self) -> None:
        response = self.client.post(self.list_url, self._payload(adults=3), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["error"], "validation_error")

    def test_booking_needs_a_paying_guest(self) -> None:
        response = self.client.post(self.list_url, self._payload(adults=0, toddlers=1), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_past_dates_rejected_for_guests(self) -> None:
        response = self.client.post(
            self.list_url, self._payload(start=date.today() - timedelta(days=5)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_admin_may_book_past_dates(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url, self._payload(start=date.today() - timedelta(days=5)), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_checkout_must_follow_checkin(self) -> None:
        response = self.client.post(self.list_url, self._payload(nights=0), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)

    def test_unknown_room_is_not_found(self) -> None:
        response = self.client.post(self.list_url, self._payload(room_ids=("99",)), format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    def test_paid_flag_ignored_for_guests(self) -> None:
        data = self._create(paid=True)

        self.assertFalse(Booking.objects.get(pk=data["id"]).paid)

    def test_service_key_is_privileged(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(paid=True),
            format="json",
            HTTP_X_API_KEY="test-service-key",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(Booking.objects.get(pk=response.data["id"]).paid)
    def test_duplicate_room_entries_rejected(self) -> None:
        payload = self._payload()
        del payload["room_ids"], payload["start_date"], payload["end_date"]
        payload["rooms"] = [
            {
                "room_id": "12",
                "start_date": str(self.start),
                "end_date": str(self.start + timedelta(days=2)),
            },
            {
                "room_id": "12",
                "start_date": str(self.start + timedelta(days=5)),
                "end_date": str(self.start + timedelta(days=7)),
            },
        ]

        response = self.client.post(self.list_url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertFalse(Booking.objects.exists())


class BulkBookingTests(BookingAPITestCase):
    """Hromadné rezervace celé chaty."""

    def _bulk_payload(self, adults: int, nights: int = 3) -> dict:
        payload = self._payload(nights=nights, adults=adults, is_bulk_booking=True)
        del payload["room_ids"]
        return payload

    def test_bulk_booking_takes_every_room(self) -> None:
        response = self.client.post(self.list_url, self._bulk_payload(12), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        booking = Booking.objects.get(pk=response.data["id"])
        self.assertTrue(booking.is_bulk_booking)
        self.assertEqual(len(booking.room_ids), 9)
        self.assertEqual(booking.total_price, 15000)

    def test_bulk_booking_minimum_guests(self) -> None:
        response = self.client.post(self.list_url, self._bulk_payload(5), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["minimum"], 10)

    def test_bulk_booking_maximum_is_bed_count(self) -> None:
        response = self.client.post(self.list_url, self._bulk_payload(27), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["maximum"], 26)

    def test_bulk_booking_conflicts_with_any_room(self) -> None:
        self._create(room_ids=("44",), start=self.start + timedelta(days=1), nights=1)

        response = self.client.post(self.list_url, self._bulk_payload(12), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["room_id"], "44")


class BatchBookingTests(BookingAPITestCase):
    def test_batch_shares_group_id(self) -> None:
        url = reverse("booking-batch")
        payload = {
            "reservations": [
                self._payload(room_ids=("12",)),
                self._payload(room_ids=("13",), start=self.start + timedelta(days=5)),
            ]
        }

        response = self.client.post(url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        group_id = response.data["group_id"]
        self.assertTrue(group_id.startswith("GRP"))
        self.assertEqual(Booking.objects.filter(group_id=group_id).count(), 2)

    def test_batch_is_all_or_nothing(self) -> None:
        url = reverse("booking-batch")
        payload = {
            "reservations": [
                self._payload(room_ids=("12",)),
                self._payload(room_ids=("12",), start=self.start + timedelta(days=1)),
            ]
        }

        response = self.client.post(url, payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertFalse(Booking.objects.exists())


class HoldFlowTests(BookingAPITestCase):
    """Podržení termínu a jeho vliv na ostatní relace."""

    def _hold(self, session: str, room_id: str = "12", nights: int = 2):
        return self.client.post(
            reverse("hold-list"),
            {
                "room_ids": [room_id],
                "start_date": str(self.start),
                "end_date": str(self.start + timedelta(days=nights)),
            },
            format="json",
            HTTP_X_SESSION_ID=session,
        )

    def test_own_hold_does_not_block_commit(self) -> None:
        self.assertEqual(self._hold("session-a").status_code, status.HTTP_201_CREATED)

        response = self.client.post(
            self.list_url, self._payload(), format="json", HTTP_X_SESSION_ID="session-a"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_commit_releases_session_holds_after_commit(self) -> None:
        self._hold("session-a")
        self._hold("session-a", room_id="13")

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                self.list_url, self._payload(), format="json", HTTP_X_SESSION_ID="session-a"
            )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertFalse(ProposedBooking.objects.filter(session_id="session-a").exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(response.data["id"], mail.outbox[0].subject + mail.outbox[0].body)

    def test_foreign_hold_blocks_commit(self) -> None:
        self._hold("session-a")

        response = self.client.post(
            self.list_url, self._payload(), format="json", HTTP_X_SESSION_ID="session-b"
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_second_session_hold_conflicts(self) -> None:
        self._hold("session-a")

        response = self._hold("session-b")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_list_and_release_own_holds(self) -> None:
        self._hold("session-a")
        self._hold("session-b", room_id="13")

        listed = self.client.get(reverse("hold-list"), HTTP_X_SESSION_ID="session-a")
        released = self.client.delete(reverse("hold-release-session"), HTTP_X_SESSION_ID="session-a")

        self.assertEqual(len(listed.data), 1)
        self.assertEqual(released.data, {"released": 1})
        self.assertTrue(ProposedBooking.objects.filter(session_id="session-b").exists())

    def test_cannot_cancel_foreign_hold(self) -> None:
        proposal_id = self._hold("session-a").data["proposal_id"]

        response = self.client.delete(reverse("hold-detail", args=[proposal_id]), HTTP_X_SESSION_ID="session-b")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_availability_endpoint_hides_own_hold(self) -> None:
        self._hold("session-a", nights=3)
        day = str(self.start + timedelta(days=1))

        own = self.client.get(reverse("availability"), {"room": "12", "date": day}, HTTP_X_SESSION_ID="session-a")
        other = self.client.get(reverse("availability"), {"room": "12", "date": day}, HTTP_X_SESSION_ID="session-b")

        self.assertEqual(own.data["status"], "available")
        self.assertEqual(other.data["status"], "proposed")

    def test_calendar_endpoint(self) -> None:
        self._create(nights=2)

        response = self.client.get(
            reverse("availability-calendar"),
            {"start": str(self.start), "end": str(self.start + timedelta(days=2)), "rooms": "12,13"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        days = response.data["rooms"]["12"]
        self.assertEqual(days[str(self.start)]["status"], "edge")
        self.assertEqual(days[str(self.start + timedelta(days=1))]["status"], "occupied")
        self.assertEqual(days[str(self.start + timedelta(days=2))]["status"], "edge")
        self.assertEqual(response.data["rooms"]["13"][str(self.start)]["status"], "available")
    def test_hold_session_comes_from_request_only(self) -> None:
        response = self.client.post(
            reverse("hold-list"),
            {
                "session_id": "session-b",
                "room_ids": ["12"],
                "start_date": str(self.start),
                "end_date": str(self.start + timedelta(days=2)),
            },
            format="json",
            HTTP_X_SESSION_ID="session-a",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["session_id"], "session-a")
        self.assertFalse(ProposedBooking.objects.filter(session_id="session-b").exists())

    def test_body_session_cannot_skip_foreign_hold(self) -> None:
        self._hold("session-a")

        response = self.client.post(
            self.list_url,
            self._payload(session_id="session-a"),
            format="json",
            HTTP_X_SESSION_ID="session-b",
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)


class PriceEndpointTests(BookingAPITestCase):
    def test_price_quote_writes_nothing(self) -> None:
        payload = self._payload(guest_type="utia", adults=1, children=1)

        response = self.client.post(reverse("price"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["total_price"], 650)
        self.assertEqual(response.data["nights"], 2)
        self.assertFalse(Booking.objects.exists())


class BookingEditTests(BookingAPITestCase):
    """Úpravy a rušení rezervací přes editační odkaz."""

    def setUp(self) -> None:
        super().setUp()
        data = self._create(nights=2)
        self.booking_id = data["id"]
        self.token = data["edit_token"]

    def _patch(self, payload: dict, token: str | None = None):
        return self.client.patch(
            self._detail_url(self.booking_id),
            payload,
            format="json",
            HTTP_X_EDIT_TOKEN=token if token is not None else self.token,
        )

    def test_retrieve_requires_token(self) -> None:
        anonymous = self.client.get(self._detail_url(self.booking_id))
        with_token = self.client.get(self._detail_url(self.booking_id), {"token": self.token})

        self.assertEqual(anonymous.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(with_token.status_code, status.HTTP_200_OK)
        self.assertNotIn("edit_token", with_token.data)

    def test_edit_contact_details(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self._patch({"phone": "+420987654321"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).phone, "+420987654321")
        self.assertEqual(len(mail.outbox), 1)

    def test_edit_with_wrong_token_is_forbidden(self) -> None:
        response = self._patch({"phone": "+420987654321"}, token="wrong-token")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_change_dates_recomputes_price(self) -> None:
        new_start = self.start + timedelta(days=10)

        response = self._patch({"start_date": str(new_start), "end_date": str(new_start + timedelta(days=3))})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking = Booking.objects.get(pk=self.booking_id)
        self.assertEqual(booking.start_date, new_start)
        self.assertEqual(booking.total_price, (500 + 100) * 3)

    def test_shrinking_own_stay_does_not_conflict_with_itself(self) -> None:
        response = self._patch(
            {"start_date": str(self.start), "end_date": str(self.start + timedelta(days=1))}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

    def test_moving_onto_another_booking_conflicts(self) -> None:
        other_start = self.start + timedelta(days=5)
        self._create(start=other_start, nights=2)

        response = self._patch({"start_date": str(other_start), "end_date": str(other_start + timedelta(days=1))})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).start_date, self.start)

    def test_guest_cannot_change_rooms(self) -> None:
        response = self._patch({"room_ids": ["13"]})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_admin_can_change_rooms(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.patch(self._detail_url(self.booking_id), {"room_ids": ["13"]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).room_ids, ["13"])

    def test_paid_booking_cannot_be_edited_by_guest(self) -> None:
        Booking.objects.filter(pk=self.booking_id).update(paid=True)

        response = self._patch({"start_date": "not-a-date"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "paid")

    def test_edit_window_closes_before_arrival(self) -> None:
        Booking.objects.filter(pk=self.booking_id).update(
            start_date=date.today() + timedelta(days=2),
            end_date=date.today() + timedelta(days=4),
        )

        response = self._patch({"phone": "+420987654321"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "edit_window_closed")

    def test_locked_price_survives_date_change(self) -> None:
        self.client.force_authenticate(self.admin)
        self.client.post(reverse("booking-lock-price", args=[self.booking_id]), {"locked": True}, format="json")
        self.client.force_authenticate(None)

        response = self._patch(
            {"start_date": str(self.start), "end_date": str(self.start + timedelta(days=1))}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(Booking.objects.get(pk=self.booking_id).total_price, (500 + 100) * 2)

    def test_guest_cannot_set_paid(self) -> None:
        response = self._patch({"paid": True})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_delete_with_token_sends_notice(self) -> None:
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.delete(self._detail_url(self.booking_id), HTTP_X_EDIT_TOKEN=self.token)

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Booking.objects.exists())
        self.assertFalse(BookingRoom.objects.exists())
        self.assertEqual(len(mail.outbox), 1)

    def test_delete_paid_booking_is_forbidden_for_guest(self) -> None:
        Booking.objects.filter(pk=self.booking_id).update(paid=True)

        response = self.client.delete(self._detail_url(self.booking_id), HTTP_X_EDIT_TOKEN=self.token)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertTrue(Booking.objects.exists())

    def test_admin_marks_paid_and_lists(self) -> None:
        self.client.force_authenticate(self.admin)

        paid = self.client.post(reverse("booking-mark-paid", args=[self.booking_id]), {}, format="json")
        listed = self.client.get(self.list_url, {"paid": "true"})

        self.assertEqual(paid.data, {"id": self.booking_id, "paid": True})
        self.assertEqual([item["id"] for item in listed.data], [self.booking_id])

    def test_list_is_admin_only(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_booking(self) -> None:
        response = self.client.delete(self._detail_url("BKUNKNOWN"), HTTP_X_EDIT_TOKEN=self.token)

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
    def test_tier_change_reprices_stored_guests(self) -> None:
        response = self._patch({"guest_type": "utia"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        booking = Booking.objects.get(pk=self.booking_id)
        self.assertEqual(booking.guest_type, "utia")
        self.assertEqual(booking.total_price, (300 + 50) * 2)
        self.assertEqual(list(booking.booking_rooms.values_list("guest_type", flat=True)), ["utia"])
        self.assertEqual(set(booking.guests.values_list("guest_type", flat=True)), {"utia"})


class SeasonalPolicyAPITests(BookingAPITestCase):
    """Vánoční období: přístupové kódy a limity pokojů."""

    def setUp(self) -> None:
        super().setUp()
        self.year = date.today().year + 1
        SeasonalRestrictionPeriod.objects.create(
            name="Vánoce",
            start_date=date(self.year, 12, 23),
            end_date=date(self.year + 1, 1, 2),
            year=self.year,
        )
        AccessCode.objects.create(code="VANOCE")
        self.christmas = date(self.year, 12, 24)
        patcher = mock.patch(
            "apps.bookings.application.command_handlers._today",
            return_value=date(self.year, 9, 1),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_code_required_before_cutoff(self) -> None:
        response = self.client.post(self.list_url, self._payload(start=self.christmas), format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["error"], "policy_violation")
        self.assertEqual(response.data["reason"], "code_required")

    def test_valid_code_proceeds(self) -> None:
        response = self.client.post(
            self.list_url, self._payload(start=self.christmas, access_code="VANOCE"), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)

    def test_valid_code_still_hits_conflicts(self) -> None:
        self._create(start=self.christmas, access_code="VANOCE")

        response = self.client.post(
            self.list_url, self._payload(start=self.christmas, access_code="VANOCE"), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)

    def test_discounted_two_rooms_warn(self) -> None:
        data = self._create(
            start=self.christmas, room_ids=("12", "13"), guest_type="utia", access_code="VANOCE"
        )

        self.assertEqual(len(data["warnings"]), 1)

    def test_discounted_three_rooms_rejected(self) -> None:
        response = self.client.post(
            self.list_url,
            self._payload(start=self.christmas, room_ids=("12", "13", "14"), guest_type="utia", access_code="VANOCE"),
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "room_limit")

    def test_invalid_codes_are_rate_limited(self) -> None:
        with mock.patch.object(access_code_limiter, "max_attempts", 2):
            for _ in range(2):
                response = self.client.post(
                    self.list_url, self._payload(start=self.christmas, access_code="SPATNE"), format="json"
                )
                self.assertEqual(response.data["reason"], "code_invalid")

            response = self.client.post(
                self.list_url, self._payload(start=self.christmas, access_code="VANOCE"), format="json"
            )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "rate_limited")

    def _patch_booking(self, data: dict, payload: dict):
        return self.client.patch(
            self._detail_url(data["id"]), payload, format="json", HTTP_X_EDIT_TOKEN=data["edit_token"]
        )

    def test_tier_change_cannot_bypass_room_limit(self) -> None:
        data = self._create(start=self.christmas, room_ids=("12", "13", "14"), access_code="VANOCE")

        response = self._patch_booking(data, {"guest_type": "utia", "access_code": "VANOCE"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "room_limit")
        booking = Booking.objects.get(pk=data["id"])
        self.assertEqual(booking.guest_type, "external")
        self.assertEqual(booking.total_price, data["total_price"])

    def test_invalid_codes_on_edit_are_rate_limited(self) -> None:
        data = self._create(start=self.christmas, access_code="VANOCE")

        with mock.patch.object(access_code_limiter, "max_attempts", 2):
            for _ in range(2):
                response = self._patch_booking(data, {"adults": 1, "access_code": "SPATNE"})
                self.assertEqual(response.data["reason"], "code_invalid")

            response = self._patch_booking(data, {"adults": 1, "access_code": "VANOCE"})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(response.data["reason"], "rate_limited")
        self.assertEqual(Booking.objects.get(pk=data["id"]).adults, 2)


class StaffTokenTests(BookingAPITestCase):
    """JWT přihlášení správce."""

    def test_staff_token_grants_booking_listing(self) -> None:
        self._create()
        token = self.client.post(
            reverse("token_obtain_pair"),
            {"username": "spravce", "password": "AdminPass123"},
            format="json",
        )
        self.assertEqual(token.status_code, status.HTTP_200_OK, token.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.data['access']}")
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(len(response.data), 1)

    def test_refresh_issues_new_access_token(self) -> None:
        token = self.client.post(
            reverse("token_obtain_pair"),
            {"username": "spravce", "password": "AdminPass123"},
            format="json",
        )

        response = self.client.post(reverse("token_refresh"), {"refresh": token.data["refresh"]}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)
