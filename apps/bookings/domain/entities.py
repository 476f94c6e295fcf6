"""
Booking Domain Entities

Core business entities for the booking domain:
- Room: read-only snapshot of a rentable room and its owner
- Booking: Main aggregate representing a reservation of a room
- BookingStatus: FSM states for booking lifecycle
- PaymentStatus: Payment state tracking
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Tuple
from uuid import UUID

from shared.domain.base import Aggregate, DomainError, Entity, ErrorKind
from shared.domain.value_objects import Money, TimeRange


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions (see status_machine.ALLOWED_TRANSITIONS):
    - PENDING -> ACCEPTED (studio owner accepted)
    - PENDING -> REJECTED (studio owner declined)
    - PENDING -> CANCELLED
    - ACCEPTED -> COMPLETED (session took place)
    - ACCEPTED -> CANCELLED
    """
    PENDING = 'PENDING'
    ACCEPTED = 'ACCEPTED'
    REJECTED = 'REJECTED'
    COMPLETED = 'COMPLETED'
    CANCELLED = 'CANCELLED'


class PaymentStatus(Enum):
    """Payment status tracking"""
    PENDING = 'PENDING'     # Waiting for payment
    PAID = 'PAID'           # Payment settled
    FAILED = 'FAILED'       # Payment attempt failed


# Bookings in these states occupy the room's calendar
BLOCKING_STATUSES = (BookingStatus.PENDING, BookingStatus.ACCEPTED)


def normalize_equipment_ids(equipment_ids: Iterable[str] | None) -> Tuple[str, ...]:
    """Trim, drop blanks, deduplicate and sort equipment references"""
    cleaned = {str(item).strip() for item in (equipment_ids or ())}
    cleaned.discard('')
    return tuple(sorted(cleaned))


@dataclass(kw_only=True, eq=False)
class Room(Entity):
    """Room as seen by the engine: its rate and who owns its studio"""
    studio_id: UUID
    owner_id: UUID
    name: str = ''
    hourly_price: int
    daily_price: int = 0


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a photographer's reservation of a room for a time window.

    Key invariants:
    - time_range.start < time_range.end (enforced by TimeRange)
    - total_price is derived from the room rate and the time range at admission
    - payment_status moves PENDING -> PAID at most once, never back
    - bookings are never deleted; history lives in the status fields
    """

    room_id: UUID
    photographer_id: UUID
    time_range: TimeRange
    equipment_ids: Tuple[str, ...] = ()
    total_price: Money
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime

    def __post_init__(self):
        self.equipment_ids = normalize_equipment_ids(self.equipment_ids)

    def change_status(self, target: BookingStatus, contact: str | None = None):
        """
        Apply an already-authorized status transition

        Authorization and table checks live in status_machine.evaluate();
        this only records the change.
        Events: BookingStatusChanged
        """
        from apps.bookings.domain.events import BookingStatusChanged

        old_status = self.status
        self.status = target

        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            old_status=old_status,
            new_status=target,
            photographer_id=self.photographer_id,
            contact=contact
        ))

    def mark_paid(self, payment_id: UUID, contact: str | None = None):
        """
        Record a settled payment (payment PENDING -> PAID)

        Booking status is left untouched.
        Events: BookingPaid
        """
        if self.payment_status != PaymentStatus.PENDING:
            raise DomainError(
                ErrorKind.INVALID_STATUS,
                f"Cannot mark booking {self.id} paid from payment status {self.payment_status.value}"
            )

        from apps.bookings.domain.events import BookingPaid

        self.payment_status = PaymentStatus.PAID

        self.add_event(BookingPaid(
            aggregate_id=self.id,
            booking_id=self.id,
            payment_id=payment_id,
            photographer_id=self.photographer_id,
            contact=contact
        ))

    def blocks_calendar(self) -> bool:
        """Only PENDING and ACCEPTED bookings block the room"""
        return self.status in BLOCKING_STATUSES

    @property
    def start(self) -> datetime:
        return self.time_range.start

    @property
    def end(self) -> datetime:
        return self.time_range.end

    def __str__(self):
        return f"Booking {self.id} ({self.status.value}/{self.payment_status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, room_id={self.room_id}, "
            f"status={self.status.value}, payment_status={self.payment_status.value}, "
            f"time_range={self.time_range})"
        )
