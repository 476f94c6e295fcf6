"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Admit a new booking request for a room
- ChangeBookingStatusCommand: Move a booking along the status machine

Every handler returns a result object instead of raising: rejections are
raised as DomainError inside the unit of work (so the transaction rolls
back) and converted at the handler boundary.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Sequence
from uuid import UUID
import logging

from django.conf import settings  # type: ignore
from django.db import DatabaseError  # type: ignore

from shared.application.clock import Clock, SystemClock
from shared.application.locks import room_locks, serialize_unless_row_locking
from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.base import DomainError, ErrorKind
from shared.domain.value_objects import TimeRange
from apps.bookings.domain.entities import BLOCKING_STATUSES, Booking, BookingStatus
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import quote
from apps.bookings.domain.status_machine import (
    BookingStatusContext,
    TransitionDecision,
    evaluate,
)
from apps.users.roles import UserRole

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to admit a new booking

    start/end are aware datetimes; equipment_ids are normalized on the aggregate.
    """
    room_id: UUID
    requester_id: UUID
    start: datetime
    end: datetime
    equipment_ids: Sequence[str] = field(default_factory=tuple)


@dataclass
class ChangeBookingStatusCommand:
    """Command to move a booking to target_status on behalf of requester"""
    booking_id: UUID
    requester_id: UUID
    role: UserRole | None
    target_status: BookingStatus


# ===== Results =====

@dataclass
class AdmissionResult:
    booking: Booking | None = None
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class StatusChangeResult:
    booking: Booking | None = None
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Validate the range and the grace window (no I/O)
    2. Serialize on the room: row lock (SELECT FOR UPDATE) when the store
       supports it, otherwise an in-process lock keyed on the room id
    3. Inside one transaction: re-check overlapping PENDING/ACCEPTED
       bookings, price the range and insert PENDING/PENDING
    4. Publish BookingCreated after commit
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        clock: Clock | None = None,
    ):
        self.uow_factory = uow_factory
        self.clock = clock or SystemClock()

    @property
    def grace(self) -> timedelta:
        return timedelta(minutes=getattr(settings, 'BOOKING_PAST_GRACE_MINUTES', 10))

    @property
    def unit_minutes(self) -> int:
        return getattr(settings, 'BOOKING_BILLING_UNIT_MINUTES', 60)

    @property
    def currency(self) -> str:
        return getattr(settings, 'BOOKING_CURRENCY', 'IRR')

    def handle(self, command: CreateBookingCommand) -> AdmissionResult:
        logger.info(
            f"Admitting booking for room {command.room_id}, "
            f"requester {command.requester_id}, range {command.start} - {command.end}"
        )

        if command.start >= command.end:
            return self._reject(command, ErrorKind.INVALID_RANGE, "Start must be before end")

        now = self.clock.now()
        if command.start < now - self.grace:
            return self._reject(
                command,
                ErrorKind.START_TOO_FAR_IN_PAST,
                f"Start {command.start.isoformat()} is too far in the past",
            )

        time_range = TimeRange(command.start, command.end)
        uow = self.uow_factory()

        try:
            with serialize_unless_row_locking(uow, room_locks, command.room_id):
                with uow:
                    booking = self._admit(uow, command, time_range, now)
        except DomainError as e:
            return self._reject(command, e.kind, e.message)
        except DatabaseError as e:
            logger.error(f"Storage failure while admitting booking for room {command.room_id}: {e}", exc_info=True)
            return AdmissionResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        logger.info(
            f"Booking admitted: {booking.id} for room {booking.room_id}, "
            f"total {booking.total_price}"
        )
        return AdmissionResult(booking=booking)

    def _admit(self, uow, command: CreateBookingCommand, time_range: TimeRange, now: datetime) -> Booking:
        # Row lock on the room serializes concurrent admissions for it
        room = uow.rooms.get(command.room_id, lock=True)
        if room is None:
            raise DomainError(ErrorKind.ROOM_NOT_FOUND, f"Room {command.room_id} not found")

        overlapping = uow.bookings.find_overlapping(room.id, time_range, BLOCKING_STATUSES)
        if overlapping:
            raise DomainError(
                ErrorKind.CONFLICT,
                f"Room {room.id} is not available for {time_range}. "
                f"Found {len(overlapping)} overlapping booking(s)."
            )

        booking = Booking(
            room_id=room.id,
            photographer_id=command.requester_id,
            time_range=time_range,
            equipment_ids=tuple(command.equipment_ids or ()),
            total_price=quote(room.hourly_price, time_range, self.currency, self.unit_minutes),
            created_at=now,
        )
        booking.add_event(BookingCreated(
            aggregate_id=booking.id,
            booking_id=booking.id,
            room_id=room.id,
            photographer_id=command.requester_id,
            time_range=time_range,
            total_price=booking.total_price
        ))

        uow.bookings.add(booking)
        uow.collect_events(booking)
        return booking

    @staticmethod
    def _reject(command: CreateBookingCommand, kind: ErrorKind, message: str) -> AdmissionResult:
        logger.warning(f"Booking for room {command.room_id} rejected ({kind.value}): {message}")
        return AdmissionResult(error=kind, message=message)


class ChangeBookingStatusHandler:
    """
    Handler for ChangeBookingStatus command

    Loads the booking (row locked) and the owner of its room's studio,
    asks the status machine for a decision and applies it.
    BookingStatusChanged carries the photographer's contact so the
    notification collaborator can address it after commit.
    """

    def __init__(self, uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork):
        self.uow_factory = uow_factory

    def handle(self, command: ChangeBookingStatusCommand) -> StatusChangeResult:
        logger.info(
            f"Changing booking {command.booking_id} to {command.target_status.value} "
            f"by {command.requester_id}"
        )

        try:
            with self.uow_factory() as uow:
                booking = uow.bookings.get(command.booking_id, lock=True)
                if booking is None:
                    raise DomainError(ErrorKind.NOT_FOUND, f"Booking {command.booking_id} not found")

                room = uow.rooms.get(booking.room_id)
                context = BookingStatusContext(
                    booking_id=booking.id,
                    current_status=booking.status,
                    photographer_id=booking.photographer_id,
                    studio_owner_id=room.owner_id if room else None,
                )

                if command.role is None:
                    decision = TransitionDecision.FORBIDDEN
                else:
                    decision = evaluate(command.role, command.requester_id, context, command.target_status)

                if decision is TransitionDecision.INVALID_TRANSITION:
                    raise DomainError(
                        ErrorKind.INVALID_TRANSITION,
                        f"Cannot move booking from {booking.status.value} to {command.target_status.value}"
                    )
                if decision is TransitionDecision.FORBIDDEN:
                    raise DomainError(
                        ErrorKind.FORBIDDEN,
                        "You are not allowed to change the status of this booking"
                    )

                contact = uow.users.get_contact(booking.photographer_id)
                booking.change_status(command.target_status, contact=contact)

                uow.collect_events(booking)
                uow.bookings.update(booking)
        except DomainError as e:
            logger.warning(f"Status change of booking {command.booking_id} rejected ({e.kind.value}): {e.message}")
            return StatusChangeResult(error=e.kind, message=e.message)
        except DatabaseError as e:
            logger.error(f"Storage failure while changing booking {command.booking_id}: {e}", exc_info=True)
            return StatusChangeResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        logger.info(f"Booking {booking.id} is now {booking.status.value}")
        return StatusChangeResult(booking=booking)
