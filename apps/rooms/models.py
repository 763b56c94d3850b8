"""Room catalog and blockage models."""

from __future__ import annotations

import secrets
import string

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import DateRange

_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_blockage_id() -> str:
    return "BLK" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


class Room(models.Model):
    """Pokoj chaty. Katalog je malý a téměř neměnný."""

    class Size(models.TextChoices):
        SMALL = "small", _("Malý pokoj")
        LARGE = "large", _("Velký pokoj")

    id = models.CharField(max_length=10, primary_key=True)
    name = models.CharField(max_length=100)
    size = models.CharField(max_length=10, choices=Size.choices, default=Size.SMALL)
    beds = models.PositiveSmallIntegerField(default=2)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Pokoj")
        verbose_name_plural = _("Pokoje")
        ordering = ["sort_order", "id"]
        constraints = [
            models.CheckConstraint(check=models.Q(beds__gte=1), name="room_has_beds"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Blockage(models.Model):
    """Administrátorská blokace termínu, nezávislá na rezervacích.

    Days start_date..end_date are blocked inclusive; an empty room set
    blocks the whole chalet.
    """

    blockage_id = models.CharField(
        max_length=20,
        primary_key=True,
        default=generate_blockage_id,
        editable=False,
    )
    start_date = models.DateField()
    end_date = models.DateField()
    rooms = models.ManyToManyField(Room, blank=True, related_name="blockages")
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blokace")
        verbose_name_plural = _("Blokace")
        ordering = ["-start_date"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(end_date__gte=models.F("start_date")),
                name="blockage_valid_date_range",
            ),
        ]
        indexes = [
            models.Index(fields=["start_date", "end_date"], name="blockage_dates_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.blockage_id}: {self.start_date} - {self.end_date}"

    @property
    def date_range(self) -> DateRange:
        """Blocked nights: every night starting on a blocked day."""
        return DateRange.for_days(self.start_date, self.end_date)
