"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeRange
from apps.bookings.domain.entities import BookingStatus


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A booking request was admitted (PENDING/PENDING)
    """
    booking_id: UUID
    room_id: UUID
    photographer_id: UUID
    time_range: TimeRange
    total_price: Money


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: Booking status moved along the status machine

    Triggers:
    - Status notification to the photographer
    """
    booking_id: UUID
    old_status: BookingStatus
    new_status: BookingStatus
    photographer_id: UUID
    contact: str | None = None


@dataclass(kw_only=True)
class BookingPaid(DomainEvent):
    """
    Event: The gateway settled the booking's payment

    Triggers:
    - Payment confirmation to the photographer
    """
    booking_id: UUID
    payment_id: UUID
    photographer_id: UUID
    contact: str | None = None
