"""Serializers for the booking API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingStatus
from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    room_id = serializers.UUIDField(read_only=True)
    photographer_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "room_id",
            "photographer_id",
            "start_time",
            "end_time",
            "equipment_ids",
            "total_price",
            "currency",
            "booking_status",
            "payment_status",
            "created_at",
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Request to reserve a room; the engine decides whether it is admitted."""

    room_id = serializers.UUIDField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    equipment_ids = serializers.ListField(
        child=serializers.CharField(allow_blank=True, max_length=100),
        required=False,
        default=list,
    )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[status.value for status in BookingStatus])

    def validate_status(self, value: str) -> BookingStatus:
        return BookingStatus(value)
