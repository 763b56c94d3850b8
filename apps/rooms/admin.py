"""Admin registrations for rooms and blockages."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Blockage, Room


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "size", "beds", "is_active", "sort_order")
    list_filter = ("size", "is_active")
    ordering = ("sort_order", "id")


@admin.register(Blockage)
class BlockageAdmin(admin.ModelAdmin):
    list_display = ("blockage_id", "start_date", "end_date", "reason", "created_at")
    search_fields = ("blockage_id", "reason")
    filter_horizontal = ("rooms",)
    readonly_fields = ("blockage_id", "created_at")
