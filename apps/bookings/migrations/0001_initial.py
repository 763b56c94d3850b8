import apps.bookings.models
import django.db.models.deletion
from django.db import migrations, models

GUEST_TYPE_CHOICES = [("utia", "Zaměstnanec ÚTIA"), ("external", "Externí host")]
PERSON_TYPE_CHOICES = [("adult", "Dospělý"), ("child", "Dítě (3-17 let)"), ("toddler", "Batole (do 3 let)")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rooms", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.bookings.models.generate_booking_id,
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "edit_token",
                    models.CharField(
                        default=apps.bookings.models.generate_edit_token,
                        editable=False,
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("phone", models.CharField(blank=True, max_length=30)),
                ("company", models.CharField(blank=True, max_length=100)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("city", models.CharField(blank=True, max_length=100)),
                ("zip_code", models.CharField(blank=True, max_length=10)),
                ("ico", models.CharField(blank=True, max_length=20)),
                ("dic", models.CharField(blank=True, max_length=20)),
                ("notes", models.TextField(blank=True)),
                ("guest_type", models.CharField(choices=GUEST_TYPE_CHOICES, default="external", max_length=10)),
                ("adults", models.PositiveSmallIntegerField(default=0)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("toddlers", models.PositiveSmallIntegerField(default=0)),
                ("start_date", models.DateField(help_text="Nejdřívější příjezd ze všech pokojů")),
                ("end_date", models.DateField(help_text="Nejpozdější odjezd ze všech pokojů")),
                ("total_price", models.PositiveIntegerField(default=0)),
                ("paid", models.BooleanField(default=False)),
                (
                    "price_locked",
                    models.BooleanField(
                        default=False,
                        help_text="Zamčená cena se při úpravách rezervace nepřepočítává.",
                    ),
                ),
                ("is_bulk_booking", models.BooleanField(default=False)),
                ("group_id", models.CharField(blank=True, db_index=True, max_length=40)),
                ("session_id", models.CharField(blank=True, max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Rezervace",
                "verbose_name_plural": "Rezervace",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["start_date", "end_date"], name="booking_dates_idx"),
                    models.Index(fields=["email"], name="booking_email_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        check=models.Q(end_date__gt=models.F("start_date")),
                        name="booking_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("adults", models.PositiveSmallIntegerField(default=0)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("toddlers", models.PositiveSmallIntegerField(default=0)),
                ("guest_type", models.CharField(choices=GUEST_TYPE_CHOICES, default="external", max_length=10)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="booking_rooms",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="booking_rooms",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Pokoj rezervace",
                "verbose_name_plural": "Pokoje rezervace",
                "ordering": ["room__sort_order", "room_id"],
                "indexes": [
                    models.Index(fields=["room", "start_date", "end_date"], name="booking_room_dates_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("booking", "room"), name="booking_room_unique"),
                    models.CheckConstraint(
                        check=models.Q(end_date__gt=models.F("start_date")),
                        name="booking_room_valid_dates",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BookingGuest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("person_type", models.CharField(choices=PERSON_TYPE_CHOICES, default="adult", max_length=10)),
                ("guest_type", models.CharField(choices=GUEST_TYPE_CHOICES, default="external", max_length=10)),
                ("first_name", models.CharField(blank=True, max_length=50)),
                ("last_name", models.CharField(blank=True, max_length=50)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="guests",
                        to="bookings.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Host",
                "verbose_name_plural": "Hosté",
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ProposedBooking",
            fields=[
                (
                    "proposal_id",
                    models.CharField(
                        default=apps.bookings.models.generate_proposal_id,
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("session_id", models.CharField(db_index=True, max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expires_at", models.DateTimeField(db_index=True)),
            ],
            options={
                "verbose_name": "Navržená rezervace",
                "verbose_name_plural": "Navržené rezervace",
                "ordering": ["created_at"],
            },
        ),
        migrations.CreateModel(
            name="ProposedBookingRoom",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("guests", models.PositiveSmallIntegerField(default=0)),
                (
                    "proposal",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rooms",
                        to="bookings.proposedbooking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="proposed_rooms",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["room", "start_date", "end_date"], name="proposed_room_dates_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        check=models.Q(end_date__gt=models.F("start_date")),
                        name="proposed_room_valid_dates",
                    ),
                ],
            },
        ),
    ]
