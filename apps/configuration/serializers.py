"""Schema validation for the booking settings record."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AccessCode, BookingConfiguration, SeasonalRestrictionPeriod

MAX_RATE = 1_000_000


def _rate_field():
    return serializers.IntegerField(min_value=0, max_value=MAX_RATE)


class RoomRatesSerializer(serializers.Serializer):
    base = _rate_field()
    adult = _rate_field()
    child = _rate_field()


class SizeRatesSerializer(serializers.Serializer):
    small = RoomRatesSerializer()
    large = RoomRatesSerializer()


class PriceTableSerializer(serializers.Serializer):
    utia = SizeRatesSerializer()
    external = SizeRatesSerializer()


class BulkPriceTableSerializer(serializers.Serializer):
    base_price = _rate_field()
    utia_adult = _rate_field()
    utia_child = _rate_field()
    external_adult = _rate_field()
    external_child = _rate_field()


class BookingConfigurationSerializer(serializers.ModelSerializer):
    prices = PriceTableSerializer()
    bulk_prices = BulkPriceTableSerializer()

    class Meta:
        model = BookingConfiguration
        fields = ["prices", "bulk_prices", "bulk_min_guests", "bulk_max_guests", "updated_at"]
        read_only_fields = ["updated_at"]

    def validate(self, attrs):  # type: ignore
        minimum = attrs.get("bulk_min_guests", getattr(self.instance, "bulk_min_guests", None))
        maximum = attrs.get("bulk_max_guests", getattr(self.instance, "bulk_max_guests", None))
        if minimum is not None and maximum is not None and maximum < minimum:
            raise serializers.ValidationError(
                {"bulk_max_guests": "Maximální počet hostů nesmí být menší než minimální."}
            )
        return attrs

    def update(self, instance, validated_data):  # type: ignore
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class SeasonalRestrictionPeriodSerializer(serializers.ModelSerializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)

    class Meta:
        model = SeasonalRestrictionPeriod
        fields = ["period_id", "name", "start_date", "end_date", "year", "created_at"]
        read_only_fields = ["period_id", "created_at"]

    def validate(self, attrs):  # type: ignore
        start = attrs.get("start_date", getattr(self.instance, "start_date", None))
        end = attrs.get("end_date", getattr(self.instance, "end_date", None))
        if start and end and start > end:
            raise serializers.ValidationError("Konec období nesmí být před jeho začátkem.")
        if not attrs.get("year") and not getattr(self.instance, "year", None) and start:
            attrs["year"] = start.year
        return attrs


class AccessCodeSerializer(serializers.ModelSerializer):
    class Meta:
        model = AccessCode
        fields = ["id", "code", "description", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_code(self, value: str) -> str:
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Kód nesmí být prázdný.")
        return value
