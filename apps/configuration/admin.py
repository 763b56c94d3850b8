"""Admin registrations for booking settings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import AccessCode, BookingConfiguration, SeasonalRestrictionPeriod


@admin.register(BookingConfiguration)
class BookingConfigurationAdmin(admin.ModelAdmin):
    list_display = ("__str__", "bulk_min_guests", "bulk_max_guests", "updated_at")
    readonly_fields = ("updated_at",)

    def has_add_permission(self, request):  # type: ignore
        return not BookingConfiguration.objects.exists()


@admin.register(SeasonalRestrictionPeriod)
class SeasonalRestrictionPeriodAdmin(admin.ModelAdmin):
    list_display = ("period_id", "name", "start_date", "end_date", "year")
    list_filter = ("year",)
    readonly_fields = ("period_id", "created_at")


@admin.register(AccessCode)
class AccessCodeAdmin(admin.ModelAdmin):
    list_display = ("code", "description", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("code", "description")
