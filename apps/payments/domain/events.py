"""
Payment Domain Events

A settled payment is announced by the booking (BookingPaid); only the
failure has its own event.
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class PaymentFailed(DomainEvent):
    """Event: The gateway reported a failed payment attempt"""
    payment_id: UUID
    booking_id: UUID
    error_detail: str = ''
