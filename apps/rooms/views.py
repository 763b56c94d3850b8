"""Room catalog and blockage API views."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore

from .models import Blockage, Room
from .serializers import BlockageSerializer, BlockageWriteSerializer, RoomSerializer
from .services import create_blockage, delete_blockage


class IsAdminOrReadOnly(permissions.BasePermission):
    """Katalog pokojů čte kdokoli, mění jen personál."""

    def has_permission(self, request, view):  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)


class RoomViewSet(viewsets.ModelViewSet):
    serializer_class = RoomSerializer
    permission_classes = [IsAdminOrReadOnly]

    def get_queryset(self):  # type: ignore
        qs = Room.objects.all()
        user = self.request.user
        if not (user.is_authenticated and user.is_staff):
            qs = qs.filter(is_active=True)
        return qs


class BlockageViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Administrátorské blokace termínů."""

    queryset = Blockage.objects.prefetch_related("rooms").all()
    permission_classes = [permissions.IsAdminUser]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BlockageWriteSerializer
        return BlockageSerializer

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        params = self.request.query_params
        if params.get("start"):
            qs = qs.filter(end_date__gte=params["start"])
        if params.get("end"):
            qs = qs.filter(start_date__lte=params["end"])
        if params.get("room"):
            qs = qs.filter(Q(rooms__id=params["room"]) | Q(rooms__isnull=True))
        return qs.distinct()

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        blockage = create_blockage(
            serializer.validated_data["start_date"],
            serializer.validated_data["end_date"],
            serializer.validated_data["rooms"],
            serializer.validated_data["reason"],
        )
        read_serializer = BlockageSerializer(blockage, context=self.get_serializer_context())
        return Response(read_serializer.data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        delete_blockage(kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)
