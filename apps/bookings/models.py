"""Booking domain models for the chalet."""

from __future__ import annotations

import secrets
import string
from datetime import date

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.value_objects import DateRange

_ID_ALPHABET = string.ascii_uppercase + string.digits


def _random_id(prefix: str, length: int) -> str:
    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_booking_id() -> str:
    return _random_id("BK", 13)


def generate_proposal_id() -> str:
    return _random_id("PROP", 9)


def generate_edit_token() -> str:
    return secrets.token_urlsafe(30)


class GuestType(models.TextChoices):
    UTIA = "utia", _("Zaměstnanec ÚTIA")
    EXTERNAL = "external", _("Externí host")


class PersonType(models.TextChoices):
    ADULT = "adult", _("Dospělý")
    CHILD = "child", _("Dítě (3-17 let)")
    TODDLER = "toddler", _("Batole (do 3 let)")


class Booking(EventRecorder, models.Model):
    """Rezervace jednoho nebo více pokojů, případně celé chaty."""

    id = models.CharField(max_length=20, primary_key=True, default=generate_booking_id, editable=False)
    edit_token = models.CharField(max_length=64, unique=True, default=generate_edit_token, editable=False)

    name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True)
    company = models.CharField(max_length=100, blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    zip_code = models.CharField(max_length=10, blank=True)
    ico = models.CharField(max_length=20, blank=True)
    dic = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)

    guest_type = models.CharField(max_length=10, choices=GuestType.choices, default=GuestType.EXTERNAL)
    adults = models.PositiveSmallIntegerField(default=0)
    children = models.PositiveSmallIntegerField(default=0)
    toddlers = models.PositiveSmallIntegerField(default=0)

    start_date = models.DateField(help_text=_("Nejdřívější příjezd ze všech pokojů"))
    end_date = models.DateField(help_text=_("Nejpozdější odjezd ze všech pokojů"))

    total_price = models.PositiveIntegerField(default=0)
    paid = models.BooleanField(default=False)
    price_locked = models.BooleanField(
        default=False,
        help_text=_("Zamčená cena se při úpravách rezervace nepřepočítává."),
    )
    is_bulk_booking = models.BooleanField(default=False)
    group_id = models.CharField(max_length=40, blank=True, db_index=True)
    session_id = models.CharField(max_length=64, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Rezervace")
        verbose_name_plural = _("Rezervace")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
            models.Index(fields=["email"], name="booking_email_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking {self.id} ({self.name})"

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def room_ids(self) -> list[str]:
        return [booking_room.room_id for booking_room in self.booking_rooms.all()]

    def days_until_start(self, today: date | None = None) -> int:
        today = today or timezone.localdate()
        return (self.start_date - today).days

    def snapshot(self) -> dict:
        """What the deletion e-mail needs once the row is gone."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "rooms": self.room_ids,
            "total_price": self.total_price,
            "is_bulk_booking": self.is_bulk_booking,
        }


class BookingRoom(models.Model):
    """Pokoj rezervace s vlastním termínem a počty hostů."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="booking_rooms")
    room = models.ForeignKey("rooms.Room", on_delete=models.PROTECT, related_name="booking_rooms")
    start_date = models.DateField()
    end_date = models.DateField()
    adults = models.PositiveSmallIntegerField(default=0)
    children = models.PositiveSmallIntegerField(default=0)
    toddlers = models.PositiveSmallIntegerField(default=0)
    guest_type = models.CharField(max_length=10, choices=GuestType.choices, default=GuestType.EXTERNAL)

    class Meta:
        verbose_name = _("Pokoj rezervace")
        verbose_name_plural = _("Pokoje rezervace")
        ordering = ["room__sort_order", "room_id"]
        constraints = [
            models.UniqueConstraint(fields=["booking", "room"], name="booking_room_unique"),
            models.CheckConstraint(
                check=models.Q(end_date__gt=models.F("start_date")),
                name="booking_room_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="booking_room_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.booking_id}/{self.room_id}: {self.start_date} - {self.end_date}"

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)


class BookingGuest(models.Model):
    """Jmenovitě uvedený host rezervace."""

    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name="guests")
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    person_type = models.CharField(max_length=10, choices=PersonType.choices, default=PersonType.ADULT)
    guest_type = models.CharField(max_length=10, choices=GuestType.choices, default=GuestType.EXTERNAL)
    first_name = models.CharField(max_length=50, blank=True)
    last_name = models.CharField(max_length=50, blank=True)
    order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Host")
        verbose_name_plural = _("Hosté")
        ordering = ["order", "id"]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} ({self.person_type})".strip()


class ProposedBooking(models.Model):
    """Dočasné podržení termínu během vyplňování rezervace."""

    proposal_id = models.CharField(
        max_length=20,
        primary_key=True,
        default=generate_proposal_id,
        editable=False,
    )
    session_id = models.CharField(max_length=64, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        verbose_name = _("Navržená rezervace")
        verbose_name_plural = _("Navržené rezervace")
        ordering = ["created_at"]

    def __str__(self) -> str:
        return f"{self.proposal_id} ({self.session_id})"


class ProposedBookingRoom(models.Model):
    proposal = models.ForeignKey(ProposedBooking, on_delete=models.CASCADE, related_name="rooms")
    room = models.ForeignKey("rooms.Room", on_delete=models.CASCADE, related_name="proposed_rooms")
    start_date = models.DateField()
    end_date = models.DateField()
    guests = models.PositiveSmallIntegerField(default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(
                check=models.Q(end_date__gt=models.F("start_date")),
                name="proposed_room_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_date", "end_date"], name="proposed_room_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.proposal_id}/{self.room_id}: {self.start_date} - {self.end_date}"

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)
