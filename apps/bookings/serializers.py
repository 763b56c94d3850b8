"""Serializers for the booking domain."""

from __future__ import annotations

from typing import Dict, List, Optional

from rest_framework import serializers  # type: ignore

from apps.configuration.domain import GuestType as Tier
from apps.rooms.models import Room
from shared.domain.value_objects import DateRange

from .application.command_handlers import request_from_booking, retier_request
from .domain.entities import BookingChanges, BookingRequest, ContactDetails, RoomRequest
from .domain.pricing import GuestComposition, GuestEntry, PersonType, distribute_guests
from .models import Booking, BookingGuest, BookingRoom, GuestType, ProposedBooking, ProposedBookingRoom
from .models import PersonType as PersonChoices

CONTACT_FIELDS = ("name", "email", "phone", "company", "address", "city", "zip_code", "ico", "dic", "notes")


def _date_range(start, end, field_name: str = "end_date") -> DateRange:
    try:
        return DateRange(start, end)
    except ValueError:
        raise serializers.ValidationError({field_name: "Odjezd musí být alespoň jednu noc po příjezdu."})


def _reject_duplicate_rooms(rooms: List[dict]) -> None:
    room_ids = [room["room_id"] for room in rooms]
    if len(room_ids) != len(set(room_ids)):
        raise serializers.ValidationError({"rooms": "Každý pokoj lze v rezervaci uvést jen jednou."})


# ===== Guests =====

class GuestSerializer(serializers.Serializer):
    person_type = serializers.ChoiceField(choices=PersonChoices.choices)
    guest_type = serializers.ChoiceField(choices=GuestType.choices, required=False)
    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    room_id = serializers.CharField(max_length=10, required=False, allow_null=True, default=None)


class GuestCountsMixin(serializers.Serializer):
    adults = serializers.IntegerField(min_value=0, required=False)
    children = serializers.IntegerField(min_value=0, required=False)
    toddlers = serializers.IntegerField(min_value=0, required=False)
    guests = GuestSerializer(many=True, required=False)

    def has_guest_data(self, data: dict) -> bool:
        return any(key in data for key in ("adults", "children", "toddlers", "guests"))


def composition_from(data: dict, default_tier: str) -> GuestComposition:
    """Explicit guest list wins over aggregate counts."""
    if data.get("guests"):
        return GuestComposition(
            tuple(
                GuestEntry(
                    PersonType(guest["person_type"]),
                    Tier(guest.get("guest_type") or default_tier),
                    first_name=guest.get("first_name", ""),
                    last_name=guest.get("last_name", ""),
                )
                for guest in data["guests"]
            )
        )
    return GuestComposition.from_counts(
        adults=data.get("adults", 0),
        children=data.get("children", 0),
        toddlers=data.get("toddlers", 0),
        guest_type=Tier(default_tier),
    )


class RoomStaySerializer(GuestCountsMixin):
    room_id = serializers.CharField(max_length=10)
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):  # type: ignore
        _date_range(attrs["start_date"], attrs["end_date"])
        return attrs


# ===== Reservation input =====

class ReservationSerializer(GuestCountsMixin):
    """
    Rooms, dates and guests of a reservation

    Either ``rooms`` (each room with its own dates and guests) or
    ``start_date``/``end_date`` with ``room_ids`` and guests for all of
    them. Bulk bookings take every active room.
    """

    guest_type = serializers.ChoiceField(choices=GuestType.choices, default=GuestType.EXTERNAL)
    is_bulk_booking = serializers.BooleanField(default=False)
    rooms = RoomStaySerializer(many=True, required=False)
    room_ids = serializers.ListField(child=serializers.CharField(max_length=10), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    access_code = serializers.CharField(max_length=64, required=False, allow_blank=True)

    def validate(self, attrs):  # type: ignore
        if attrs.get("rooms"):
            if attrs.get("is_bulk_booking"):
                raise serializers.ValidationError("Hromadná rezervace se zadává jedním termínem pro celou chatu.")
            _reject_duplicate_rooms(attrs["rooms"])
            return attrs
        if not attrs.get("start_date") or not attrs.get("end_date"):
            raise serializers.ValidationError("Zadejte pokoje s termíny nebo společný termín rezervace.")
        _date_range(attrs["start_date"], attrs["end_date"])
        if not attrs.get("is_bulk_booking") and not attrs.get("room_ids"):
            raise serializers.ValidationError({"room_ids": "Vyberte alespoň jeden pokoj."})
        return attrs

    def _room_requests(self, data: dict) -> Dict[str, RoomRequest]:
        tier = data["guest_type"]
        if data.get("rooms"):
            return {
                room["room_id"]: RoomRequest(
                    room_id=room["room_id"],
                    date_range=DateRange(room["start_date"], room["end_date"]),
                    guests=composition_from(room, tier),
                )
                for room in data["rooms"]
            }

        stay = DateRange(data["start_date"], data["end_date"])
        if data.get("is_bulk_booking"):
            room_ids = list(Room.objects.filter(is_active=True).values_list("id", flat=True))
            return {room_id: RoomRequest(room_id, stay) for room_id in room_ids}

        room_ids = list(dict.fromkeys(data["room_ids"]))
        placed: Dict[str, List[GuestEntry]] = {room_id: [] for room_id in room_ids}
        unplaced: List[dict] = []
        for guest in data.get("guests") or []:
            if guest.get("room_id") in placed:
                placed[guest["room_id"]].append(guest)
            else:
                unplaced.append(guest)

        if data.get("guests"):
            spread = distribute_guests(room_ids, composition_from({"guests": unplaced}, tier))
            compositions = {
                room_id: composition_from({"guests": placed[room_id]}, tier) + spread[room_id]
                for room_id in room_ids
            }
        else:
            compositions = distribute_guests(room_ids, composition_from(data, tier))
        return {
            room_id: RoomRequest(room_id, stay, compositions[room_id])
            for room_id in room_ids
        }

    def build_request(self, session_id: Optional[str] = None, contact: Optional[ContactDetails] = None) -> BookingRequest:
        data = self.validated_data
        rooms = self._room_requests(data)
        is_bulk = bool(data.get("is_bulk_booking"))
        return BookingRequest(
            rooms=rooms,
            contact=contact or ContactDetails(name="", email=""),
            guest_type=Tier(data["guest_type"]),
            is_bulk=is_bulk,
            bulk_guests=composition_from(data, data["guest_type"]) if is_bulk else GuestComposition(),
            session_id=session_id,
            access_code=data.get("access_code") or None,
            paid=bool(data.get("paid", False)),
        )


class PriceRequestSerializer(ReservationSerializer):
    pass


class BookingCreateSerializer(ReservationSerializer):
    name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default="")
    company = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(max_length=10, required=False, allow_blank=True, default="")
    ico = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    dic = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    paid = serializers.BooleanField(required=False, default=False)

    def build_request(self, session_id: Optional[str] = None, contact: Optional[ContactDetails] = None) -> BookingRequest:
        data = self.validated_data
        contact = ContactDetails(**{field: data[field] for field in CONTACT_FIELDS})
        return super().build_request(session_id=session_id, contact=contact)


class BookingBatchSerializer(serializers.Serializer):
    reservations = BookingCreateSerializer(many=True, allow_empty=False)

    def build_requests(self, session_id: Optional[str] = None) -> List[BookingRequest]:
        requests = []
        for item in self.initial_data["reservations"]:
            serializer = BookingCreateSerializer(data=item)
            serializer.is_valid(raise_exception=True)
            requests.append(serializer.build_request(session_id=session_id))
        return requests


class BookingUpdateSerializer(GuestCountsMixin):
    """Partial edit; omitted fields stay as they are."""

    name = serializers.CharField(max_length=100, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    company = serializers.CharField(max_length=100, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip_code = serializers.CharField(max_length=10, required=False, allow_blank=True)
    ico = serializers.CharField(max_length=20, required=False, allow_blank=True)
    dic = serializers.CharField(max_length=20, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    guest_type = serializers.ChoiceField(choices=GuestType.choices, required=False)
    rooms = RoomStaySerializer(many=True, required=False)
    room_ids = serializers.ListField(child=serializers.CharField(max_length=10), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    access_code = serializers.CharField(max_length=64, required=False, allow_blank=True)

    paid = serializers.BooleanField(required=False)
    price_locked = serializers.BooleanField(required=False)
    total_price = serializers.IntegerField(min_value=0, required=False)

    def validate(self, attrs):  # type: ignore
        if ("start_date" in attrs) != ("end_date" in attrs):
            raise serializers.ValidationError("Příjezd a odjezd se mění společně.")
        if attrs.get("rooms"):
            _reject_duplicate_rooms(attrs["rooms"])
        if "start_date" in attrs:
            _date_range(attrs["start_date"], attrs["end_date"])
        return attrs

    def build_changes(self, booking: Booking) -> BookingChanges:
        data = self.validated_data
        current = request_from_booking(booking)
        if "guest_type" in data:
            # kept guests follow the new tier
            current = retier_request(current, Tier(data["guest_type"]))
        tier = data.get("guest_type") or booking.guest_type

        rooms = None
        bulk_guests = None
        if data.get("rooms"):
            rooms = {
                room["room_id"]: RoomRequest(
                    room_id=room["room_id"],
                    date_range=DateRange(room["start_date"], room["end_date"]),
                    guests=composition_from(room, tier)
                    if self._room_has_guest_data(room)
                    else self._current_guests(current, room["room_id"]),
                )
                for room in data["rooms"]
            }
        elif "start_date" in data or "room_ids" in data or self.has_guest_data(data):
            room_ids = list(dict.fromkeys(data.get("room_ids") or current.room_ids))
            stay = DateRange(data["start_date"], data["end_date"]) if "start_date" in data else None
            if self.has_guest_data(data) and not booking.is_bulk_booking:
                compositions = distribute_guests(room_ids, composition_from(data, tier))
            elif set(room_ids) != set(current.room_ids) and not booking.is_bulk_booking:
                compositions = distribute_guests(room_ids, current.guests)
            else:
                compositions = {room_id: self._current_guests(current, room_id) for room_id in room_ids}
            rooms = {
                room_id: RoomRequest(
                    room_id=room_id,
                    date_range=stay or self._current_range(current, room_id),
                    guests=compositions[room_id],
                )
                for room_id in room_ids
            }
            if booking.is_bulk_booking and self.has_guest_data(data):
                bulk_guests = composition_from(data, tier)

        return BookingChanges(
            rooms=rooms,
            bulk_guests=bulk_guests,
            contact={field: data[field] for field in CONTACT_FIELDS if field in data},
            guest_type=Tier(data["guest_type"]) if "guest_type" in data else None,
            paid=data.get("paid"),
            price_locked=data.get("price_locked"),
            total_price=data.get("total_price"),
        )

    def _room_has_guest_data(self, room: dict) -> bool:
        return any(key in room for key in ("adults", "children", "toddlers", "guests"))

    @staticmethod
    def _current_guests(current: BookingRequest, room_id: str) -> GuestComposition:
        room = current.rooms.get(room_id)
        return room.guests if room else GuestComposition()

    @staticmethod
    def _current_range(current: BookingRequest, room_id: str) -> DateRange:
        room = current.rooms.get(room_id)
        return room.date_range if room else current.envelope


# ===== Output =====

class BookingRoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingRoom
        fields = ["room", "start_date", "end_date", "adults", "children", "toddlers", "guest_type"]


class BookingGuestSerializer(serializers.ModelSerializer):
    class Meta:
        model = BookingGuest
        fields = ["room", "person_type", "guest_type", "first_name", "last_name"]


class BookingSerializer(serializers.ModelSerializer):
    rooms = BookingRoomSerializer(source="booking_rooms", many=True, read_only=True)
    guests = BookingGuestSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            *CONTACT_FIELDS,
            "guest_type",
            "adults",
            "children",
            "toddlers",
            "start_date",
            "end_date",
            "rooms",
            "guests",
            "total_price",
            "paid",
            "price_locked",
            "is_bulk_booking",
            "group_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance):  # type: ignore
        data = super().to_representation(instance)
        if self.context.get("include_edit_token"):
            data["edit_token"] = instance.edit_token
        return data


# ===== Holds =====

class HoldRoomSerializer(serializers.Serializer):
    room_id = serializers.CharField(max_length=10)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    guests = serializers.IntegerField(min_value=0, required=False, default=0)

    def validate(self, attrs):  # type: ignore
        _date_range(attrs["start_date"], attrs["end_date"])
        return attrs


class HoldCreateSerializer(serializers.Serializer):
    rooms = HoldRoomSerializer(many=True, required=False)
    room_ids = serializers.ListField(child=serializers.CharField(max_length=10), required=False)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        if attrs.get("rooms"):
            _reject_duplicate_rooms(attrs["rooms"])
            attrs["stays"] = {
                room["room_id"]: DateRange(room["start_date"], room["end_date"]) for room in attrs["rooms"]
            }
            attrs["guests"] = {room["room_id"]: room["guests"] for room in attrs["rooms"]}
        elif attrs.get("room_ids") and attrs.get("start_date") and attrs.get("end_date"):
            stay = _date_range(attrs["start_date"], attrs["end_date"])
            attrs["stays"] = {room_id: stay for room_id in attrs["room_ids"]}
            attrs["guests"] = {}
        else:
            raise serializers.ValidationError("Zadejte pokoje a termín podržení.")
        return attrs


class ProposedBookingRoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProposedBookingRoom
        fields = ["room", "start_date", "end_date", "guests"]


class ProposedBookingSerializer(serializers.ModelSerializer):
    rooms = ProposedBookingRoomSerializer(many=True, read_only=True)

    class Meta:
        model = ProposedBooking
        fields = ["proposal_id", "session_id", "created_at", "expires_at", "rooms"]
        read_only_fields = fields


# ===== Queries =====

class AvailabilityQuerySerializer(serializers.Serializer):
    room = serializers.CharField(max_length=10)
    date = serializers.DateField()


class CalendarQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    rooms = serializers.CharField(required=False, allow_blank=True)

    def validate_rooms(self, value: str) -> List[str]:
        return [room_id.strip() for room_id in value.split(",") if room_id.strip()]


class AccessCodeValidateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64, allow_blank=True)
