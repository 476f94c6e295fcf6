"""
Django ORM repositories for rooms and bookings

Map ORM rows to domain entities and back. Nothing here decides anything;
the command handlers own the rules.
"""

from decimal import Decimal
from typing import Iterable, List
from uuid import UUID

from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import Money, TimeRange
from shared.infrastructure.orm import lock_queryset_if_possible
from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus, Room
from apps.bookings.domain.repositories import AbstractBookingRepository, AbstractRoomRepository
from apps.bookings.models import Booking as BookingModel
from apps.studios.models import Room as RoomModel


def _room_to_entity(model: RoomModel) -> Room:
    return Room(
        id=model.id,
        studio_id=model.studio_id,
        owner_id=model.studio.owner_id,
        name=model.name,
        hourly_price=model.hourly_price,
        daily_price=model.daily_price,
    )


def _booking_to_entity(model: BookingModel) -> Booking:
    return Booking(
        id=model.id,
        room_id=model.room_id,
        photographer_id=model.photographer_id,
        time_range=TimeRange(model.start_time, model.end_time),
        equipment_ids=tuple(model.equipment_ids or ()),
        total_price=Money(Decimal(model.total_price), model.currency),
        status=BookingStatus(model.booking_status),
        payment_status=PaymentStatus(model.payment_status),
        created_at=model.created_at,
    )


class DjangoRoomRepository(AbstractRoomRepository):

    def get(self, room_id: UUID, lock: bool = False) -> Room | None:
        queryset = RoomModel.objects.select_related('studio').filter(pk=room_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset, of=('self',))
        model = queryset.first()
        return _room_to_entity(model) if model else None


class DjangoBookingRepository(AbstractBookingRepository):

    def get(self, booking_id: UUID, lock: bool = False) -> Booking | None:
        queryset = BookingModel.objects.filter(pk=booking_id)
        if lock:
            queryset = lock_queryset_if_possible(queryset)
        model = queryset.first()
        return _booking_to_entity(model) if model else None

    def add(self, booking: Booking) -> None:
        BookingModel.objects.create(
            id=booking.id,
            room_id=booking.room_id,
            photographer_id=booking.photographer_id,
            start_time=booking.start,
            end_time=booking.end,
            equipment_ids=list(booking.equipment_ids),
            total_price=booking.total_price.amount,
            currency=booking.total_price.currency,
            booking_status=booking.status.value,
            payment_status=booking.payment_status.value,
            created_at=booking.created_at,
        )

    def update(self, booking: Booking) -> None:
        BookingModel.objects.filter(pk=booking.id).update(
            booking_status=booking.status.value,
            payment_status=booking.payment_status.value,
            updated_at=timezone.now(),
        )

    def find_overlapping(
        self,
        room_id: UUID,
        time_range: TimeRange,
        statuses: Iterable[BookingStatus],
    ) -> List[Booking]:
        queryset = BookingModel.objects.filter(
            room_id=room_id,
            booking_status__in=[status.value for status in statuses],
        ).filter(Q(start_time__lt=time_range.end) & Q(end_time__gt=time_range.start))
        return [_booking_to_entity(model) for model in queryset]
