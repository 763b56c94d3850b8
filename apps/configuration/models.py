"""Persisted booking settings, seasonal restriction periods and access codes."""

from __future__ import annotations

import secrets
import string

from django.core.exceptions import ValidationError  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .domain import DEFAULT_BULK_MIN_GUESTS, DEFAULT_BULK_PRICES, DEFAULT_PRICES

_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_period_id() -> str:
    return "XMAS" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))


def default_prices() -> dict:
    return {tier: {size: dict(rates) for size, rates in sizes.items()} for tier, sizes in DEFAULT_PRICES.items()}


def default_bulk_prices() -> dict:
    return dict(DEFAULT_BULK_PRICES)


class BookingConfiguration(models.Model):
    """Jediný záznam s ceníkem a limity hromadných rezervací."""

    SINGLETON_PK = 1

    prices = models.JSONField(default=default_prices)
    bulk_prices = models.JSONField(default=default_bulk_prices)
    bulk_min_guests = models.PositiveSmallIntegerField(default=DEFAULT_BULK_MIN_GUESTS)
    bulk_max_guests = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text=_("Prázdné = součet lůžek aktivních pokojů"),
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Nastavení rezervací")
        verbose_name_plural = _("Nastavení rezervací")

    def __str__(self) -> str:
        return str(_("Nastavení rezervací"))

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_PK
        super().save(*args, **kwargs)

    @classmethod
    def load(cls) -> "BookingConfiguration":
        instance, _created = cls.objects.get_or_create(pk=cls.SINGLETON_PK)
        return instance


class SeasonalRestrictionPeriod(models.Model):
    """Vánoční období s omezeným přístupem."""

    period_id = models.CharField(
        max_length=20,
        primary_key=True,
        default=generate_period_id,
        editable=False,
    )
    name = models.CharField(max_length=100, blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    year = models.PositiveSmallIntegerField(
        help_text=_("Rok, jehož 30. září je hranicí pro přednostní rezervace"),
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Vánoční období")
        verbose_name_plural = _("Vánoční období")
        ordering = ["start_date"]
        constraints = [
            models.CheckConstraint(
                check=models.Q(end_date__gte=models.F("start_date")),
                name="restriction_period_valid_date_range",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name or self.period_id} ({self.start_date} - {self.end_date})"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": _("Konec období musí být po jeho začátku.")})

    def save(self, *args, **kwargs):
        if not self.year and self.start_date:
            self.year = self.start_date.year
        super().save(*args, **kwargs)


class AccessCode(models.Model):
    """Přístupový kód pro rezervace vánočního období před uzávěrkou."""

    code = models.CharField(max_length=64, unique=True)
    description = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Přístupový kód")
        verbose_name_plural = _("Přístupové kódy")
        ordering = ["code"]

    def __str__(self) -> str:
        return self.code
