from __future__ import annotations

from django.core.management.base import BaseCommand  # type: ignore

from apps.configuration.models import BookingConfiguration
from apps.rooms.services import seed_default_rooms


class Command(BaseCommand):
    help = "Založí pokoje chaty a výchozí ceník, pokud ještě neexistují"

    def handle(self, *args, **options):  # type: ignore
        created = seed_default_rooms()
        BookingConfiguration.load()
        self.stdout.write(self.style.SUCCESS(f"Pokojů založeno: {created}"))
