"""API views for the booking domain."""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import mixins, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import HasKnownRole, IsPhotographer
from shared.api import error_response

from .application.command_handlers import (
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from .filters import BookingFilterSet
from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, BookingStatusSerializer


class BookingViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Reservations: photographers create, stakeholders list and move them."""

    queryset = Booking.objects.select_related("room", "room__studio").order_by("start_time")
    serializer_class = BookingSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = BookingFilterSet
    lookup_value_regex = "[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"

    def get_permissions(self):  # type: ignore
        if self.action == "create":
            return [IsPhotographer()]
        return [HasKnownRole()]

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        if self.action == "change_status":
            return BookingStatusSerializer
        return BookingSerializer

    def get_queryset(self):  # type: ignore
        user = self.request.user
        qs = super().get_queryset()
        if user.is_admin():
            return qs
        if user.is_studio_owner():
            return qs.filter(room__studio__owner=user)
        return qs.filter(photographer=user)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = CreateBookingHandler().handle(CreateBookingCommand(
            room_id=data["room_id"],
            requester_id=request.user.id,
            start=data["start_time"],
            end=data["end_time"],
            equipment_ids=data.get("equipment_ids") or [],
        ))
        if not result.ok:
            return error_response(result.error, result.message)

        booking = Booking.objects.get(pk=result.booking.id)
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ChangeBookingStatusHandler().handle(ChangeBookingStatusCommand(
            booking_id=UUID(pk),
            requester_id=request.user.id,
            role=request.user.user_role,
            target_status=serializer.validated_data["status"],
        ))
        if not result.ok:
            return error_response(result.error, result.message)

        booking = Booking.objects.get(pk=result.booking.id)
        return Response(BookingSerializer(booking).data)
