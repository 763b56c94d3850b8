"""Serializers for rooms and blockages."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Blockage, Room


class RoomSerializer(serializers.ModelSerializer):
    size_display = serializers.ReadOnlyField(source="get_size_display")

    class Meta:
        model = Room
        fields = ["id", "name", "size", "size_display", "beds", "is_active", "sort_order"]


class BlockageSerializer(serializers.ModelSerializer):
    rooms = serializers.SlugRelatedField(slug_field="id", many=True, read_only=True)

    class Meta:
        model = Blockage
        fields = ["blockage_id", "start_date", "end_date", "rooms", "reason", "created_at"]
        read_only_fields = fields


class BlockageWriteSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    rooms = serializers.ListField(child=serializers.CharField(max_length=10), required=False, default=list)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, attrs):  # type: ignore
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError("Konec blokace nesmí být před jejím začátkem.")
        return attrs
