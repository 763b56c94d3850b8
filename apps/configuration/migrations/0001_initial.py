import apps.configuration.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BookingConfiguration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prices", models.JSONField(default=apps.configuration.models.default_prices)),
                ("bulk_prices", models.JSONField(default=apps.configuration.models.default_bulk_prices)),
                ("bulk_min_guests", models.PositiveSmallIntegerField(default=10)),
                (
                    "bulk_max_guests",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Prázdné = součet lůžek aktivních pokojů",
                        null=True,
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Nastavení rezervací",
                "verbose_name_plural": "Nastavení rezervací",
            },
        ),
        migrations.CreateModel(
            name="SeasonalRestrictionPeriod",
            fields=[
                (
                    "period_id",
                    models.CharField(
                        default=apps.configuration.models.generate_period_id,
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(blank=True, max_length=100)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                (
                    "year",
                    models.PositiveSmallIntegerField(
                        help_text="Rok, jehož 30. září je hranicí pro přednostní rezervace",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Vánoční období",
                "verbose_name_plural": "Vánoční období",
                "ordering": ["start_date"],
                "constraints": [
                    models.CheckConstraint(
                        check=models.Q(end_date__gte=models.F("start_date")),
                        name="restriction_period_valid_date_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccessCode",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=64, unique=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Přístupový kód",
                "verbose_name_plural": "Přístupové kódy",
                "ordering": ["code"],
            },
        ),
    ]
