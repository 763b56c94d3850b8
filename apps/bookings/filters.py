"""FilterSet for the admin booking listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Date window, room, payment and bulk filters used by the admin panel."""

    # bookings with at least one night inside [date_from, date_to)
    date_from = django_filters.DateFilter(field_name="end_date", lookup_expr="gt")
    date_to = django_filters.DateFilter(field_name="start_date", lookup_expr="lt")
    room = django_filters.CharFilter(method="filter_room")
    email = django_filters.CharFilter(field_name="email", lookup_expr="icontains")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    paid = django_filters.BooleanFilter(field_name="paid")
    is_bulk_booking = django_filters.BooleanFilter(field_name="is_bulk_booking")
    guest_type = django_filters.ChoiceFilter(field_name="guest_type", choices=Booking._meta.get_field("guest_type").choices)
    group_id = django_filters.CharFilter(field_name="group_id")

    class Meta:
        model = Booking
        fields = ["paid", "is_bulk_booking", "guest_type", "group_id"]

    def filter_room(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        return queryset.filter(booking_rooms__room_id=value).distinct()
