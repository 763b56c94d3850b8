"""API views for the booking domain."""

from __future__ import annotations

import logging
from typing import Optional

from django.db.models import Prefetch  # type: ignore
from django.utils import timezone  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.configuration.services import load_booking_settings
from shared.domain.errors import ForbiddenError, NotFoundError, PolicyError

from .application.command_handlers import (
    authorize_mutation,
    calculate_price,
    commit_booking,
    commit_booking_batch,
    delete_booking,
    set_paid,
    set_price_locked,
    update_booking,
)
from .auth import Anonymous, resolve_auth_context
from .filters import BookingFilterSet
from .models import Booking, BookingRoom, ProposedBooking
from .serializers import (
    AccessCodeValidateSerializer,
    AvailabilityQuerySerializer,
    BookingBatchSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    CalendarQuerySerializer,
    HoldCreateSerializer,
    PriceRequestSerializer,
    ProposedBookingSerializer,
)
from .services.access_codes import access_code_limiter, validate_access_code
from .services.availability import availability_calendar, check_availability
from .services.holds import cancel_hold, create_hold, release_session_holds

logger = logging.getLogger(__name__)

SESSION_HEADER = "HTTP_X_SESSION_ID"


def get_session_id(request, *, create: bool = True) -> Optional[str]:  # type: ignore
    """Anonymous browser session scoping holds: X-Session-Id header or the Django session."""
    header = request.META.get(SESSION_HEADER)
    if header:
        return header
    session = getattr(request, "session", None)
    if session is None:
        return None
    if not session.session_key and create:
        session.save()
    return session.session_key


class IsPrivilegedCaller(permissions.BasePermission):
    """Personál nebo backendová služba s API klíčem."""

    def has_permission(self, request, view):  # type: ignore
        return resolve_auth_context(request).is_privileged


# ===== Availability =====

class AvailabilityView(APIView):
    """Stav jednoho pokoje v jednom dni."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        room_id = query.validated_data["room"]
        day = query.validated_data["date"]
        result = check_availability(room_id, day, exclude_session_id=get_session_id(request, create=False))
        return Response({"room": room_id, "date": day.isoformat(), **result.to_dict()})


class AvailabilityCalendarView(APIView):
    """Stavy všech dnů v období pro kalendář."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        query = CalendarQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        calendar = availability_calendar(
            query.validated_data["start"],
            query.validated_data["end"],
            query.validated_data.get("rooms") or None,
            exclude_session_id=get_session_id(request, create=False),
        )
        return Response(
            {
                "start": query.validated_data["start"].isoformat(),
                "end": query.validated_data["end"].isoformat(),
                "rooms": {
                    room_id: {day: status_.to_dict() for day, status_ in days.items()}
                    for room_id, days in calendar.items()
                },
            }
        )


# ===== Holds =====

class HoldViewSet(viewsets.ViewSet):
    """Podržení termínů během vyplňování rezervace."""

    permission_classes = [permissions.AllowAny]
    serializer_class = HoldCreateSerializer

    def list(self, request):  # type: ignore
        session_id = get_session_id(request, create=False)
        proposals = ProposedBooking.objects.filter(session_id=session_id).prefetch_related("rooms")
        return Response(ProposedBookingSerializer(proposals, many=True).data)

    def create(self, request):  # type: ignore
        serializer = HoldCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        proposal = create_hold(
            get_session_id(request),
            serializer.validated_data["stays"],
            serializer.validated_data["guests"],
        )
        return Response(ProposedBookingSerializer(proposal).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):  # type: ignore
        auth = resolve_auth_context(request)
        session_id = None if auth.is_privileged else get_session_id(request, create=False)
        if session_id is None and not auth.is_privileged:
            raise ForbiddenError("Chybí identifikátor relace")
        cancel_hold(pk, session_id=session_id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["delete"], url_path="session")
    def release_session(self, request):  # type: ignore
        released = release_session_holds(get_session_id(request, create=False) or "")
        return Response({"released": released})


# ===== Price =====

class PriceView(APIView):
    """Výpočet ceny bez vytvoření rezervace."""

    permission_classes = [permissions.AllowAny]
    serializer_class = PriceRequestSerializer

    def post(self, request):  # type: ignore
        serializer = PriceRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking_request = serializer.build_request()
        total = calculate_price(booking_request)
        return Response(
            {
                "total_price": total,
                "nights": len(booking_request.envelope),
                "is_bulk_booking": booking_request.is_bulk,
            }
        )


# ===== Access codes =====

class AccessCodeValidateView(APIView):
    """Ověření přístupového kódu pro vánoční období."""

    permission_classes = [permissions.AllowAny]
    serializer_class = AccessCodeValidateSerializer

    def post(self, request):  # type: ignore
        serializer = AccessCodeValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        valid = validate_access_code(
            serializer.validated_data["code"],
            request,
            load_booking_settings(),
        )
        return Response({"valid": valid})


# ===== Bookings =====

class BookingViewSet(viewsets.GenericViewSet):
    """Vytváření, úpravy a rušení rezervací."""

    queryset = Booking.objects.prefetch_related(
        Prefetch("booking_rooms", queryset=BookingRoom.objects.select_related("room")),
        "guests",
    )
    permission_classes = [permissions.AllowAny]
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action in ("update", "partial_update"):
            return BookingUpdateSerializer
        if self.action == "batch":
            return BookingBatchSerializer
        return BookingSerializer

    def get_permissions(self):  # type: ignore
        if self.action in ("list", "mark_paid", "lock_price"):
            return [IsPrivilegedCaller()]
        return super().get_permissions()

    def _booking_or_404(self, pk: str) -> Booking:
        booking = self.get_queryset().filter(pk=pk).first()
        if booking is None:
            raise NotFoundError(f"Rezervace {pk} neexistuje", booking_id=pk)
        return booking

    def _committed_response(self, results, *, status_code=status.HTTP_201_CREATED):  # type: ignore
        context = {**self.get_serializer_context(), "include_edit_token": True}
        payload = []
        for result in results:
            data = BookingSerializer(self._booking_or_404(result.booking.id), context=context).data
            data["warnings"] = result.warnings
            payload.append(data)
        return payload

    def _commit_guarded(self, request, commit):  # type: ignore
        """Run a commit or edit counting invalid seasonal codes against the client's attempt limit."""
        access_code_limiter.ensure_allowed(request)
        try:
            results = commit()
        except PolicyError as exc:
            if exc.reason == "code_invalid":
                access_code_limiter.register_failure(request)
            raise
        return results

    def list(self, request):  # type: ignore
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(queryset, many=True).data)

    def create(self, request):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        auth = resolve_auth_context(request)
        booking_request = serializer.build_request(session_id=get_session_id(request))
        result = self._commit_guarded(request, lambda: [commit_booking(booking_request, auth)])
        return Response(self._committed_response(result)[0], status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def batch(self, request):  # type: ignore
        serializer = BookingBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        auth = resolve_auth_context(request)
        requests = serializer.build_requests(session_id=get_session_id(request))
        results = self._commit_guarded(request, lambda: commit_booking_batch(requests, auth))
        return Response(
            {"group_id": results[0].booking.group_id, "bookings": self._committed_response(results)},
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):  # type: ignore
        booking = self._booking_or_404(pk)
        auth = resolve_auth_context(request)
        if not auth.is_privileged and not (isinstance(auth, Anonymous) and auth.owns(booking)):
            raise ForbiddenError("Neplatný editační odkaz")
        return Response(BookingSerializer(booking, context=self.get_serializer_context()).data)

    def partial_update(self, request, pk=None):  # type: ignore
        booking = self._booking_or_404(pk)
        auth = resolve_auth_context(request)
        # a paid or locked-out booking is refused before the payload is even read
        authorize_mutation(booking, auth, timezone.localdate())
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        changes = serializer.build_changes(booking)
        result = self._commit_guarded(
            request,
            lambda: [
                update_booking(
                    booking.id,
                    changes,
                    auth,
                    session_id=get_session_id(request, create=False),
                    access_code=serializer.validated_data.get("access_code") or None,
                )
            ],
        )[0]
        data = BookingSerializer(self._booking_or_404(result.booking.id), context=self.get_serializer_context()).data
        data["warnings"] = result.warnings
        return Response(data)

    def update(self, request, pk=None):  # type: ignore
        return self.partial_update(request, pk=pk)

    def destroy(self, request, pk=None):  # type: ignore
        delete_booking(pk, resolve_auth_context(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):  # type: ignore
        paid = request.data.get("paid", True) not in (False, "false", "0", 0)
        booking = set_paid(pk, resolve_auth_context(request), paid=paid)
        return Response({"id": booking.id, "paid": booking.paid})

    @action(detail=True, methods=["post"], url_path="lock-price")
    def lock_price(self, request, pk=None):  # type: ignore
        locked = request.data.get("locked", True) not in (False, "false", "0", 0)
        booking = set_price_locked(pk, resolve_auth_context(request), locked=locked)
        return Response({"id": booking.id, "price_locked": booking.price_locked})
