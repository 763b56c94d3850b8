"""Admin registration for bookings and holds."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking, BookingGuest, BookingRoom, ProposedBooking, ProposedBookingRoom


class BookingRoomInline(admin.TabularInline):
    model = BookingRoom
    extra = 0
    fields = ("room", "start_date", "end_date", "adults", "children", "toddlers", "guest_type")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):  # type: ignore
        # room ranges change only through the API, which re-checks conflicts
        return False


class BookingGuestInline(admin.TabularInline):
    model = BookingGuest
    extra = 0
    fields = ("room", "person_type", "guest_type", "first_name", "last_name", "order")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "email",
        "start_date",
        "end_date",
        "total_price",
        "paid",
        "price_locked",
        "is_bulk_booking",
        "created_at",
    )
    list_filter = ("paid", "price_locked", "is_bulk_booking", "guest_type", "start_date")
    search_fields = ("id", "name", "email", "phone", "company", "group_id")
    readonly_fields = ("id", "edit_token", "session_id", "created_at", "updated_at")
    inlines = (BookingRoomInline, BookingGuestInline)


class ProposedBookingRoomInline(admin.TabularInline):
    model = ProposedBookingRoom
    extra = 0


@admin.register(ProposedBooking)
class ProposedBookingAdmin(admin.ModelAdmin):
    list_display = ("proposal_id", "session_id", "created_at", "expires_at")
    search_fields = ("proposal_id", "session_id")
    readonly_fields = ("proposal_id", "created_at")
    inlines = (ProposedBookingRoomInline,)
