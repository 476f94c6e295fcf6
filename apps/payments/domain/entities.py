"""
Payment Domain Entities

- PaymentGateway: supported gateways
- PaymentRecord: one payment attempt for a booking (aggregate root)

A record moves PENDING -> PAID or PENDING -> FAILED exactly once; both
are terminal. Replayed callbacks find it terminal and change nothing.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from shared.domain.base import Aggregate, DomainError, ErrorKind
from shared.domain.value_objects import Money
from apps.bookings.domain.entities import PaymentStatus


class PaymentGateway(Enum):
    ZARINPAL = 'ZARINPAL'
    IDPAY = 'IDPAY'
    NEXTPAY = 'NEXTPAY'

    @classmethod
    def default(cls) -> 'PaymentGateway':
        return cls.ZARINPAL


TERMINAL_PAYMENT_STATUSES = frozenset({PaymentStatus.PAID, PaymentStatus.FAILED})


@dataclass(kw_only=True, eq=False)
class PaymentRecord(Aggregate):
    booking_id: UUID
    amount: Money
    gateway: PaymentGateway = PaymentGateway.ZARINPAL
    status: PaymentStatus = PaymentStatus.PENDING
    external_ref: str | None = None
    payment_url: str = ''
    error_detail: str = ''
    created_at: datetime
    settled_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES

    def attach_checkout(self, payment_url: str, external_ref: str):
        """Store what the gateway handed out for this attempt"""
        self.payment_url = payment_url
        self.external_ref = external_ref

    def mark_paid(self, at: datetime):
        self._settle(PaymentStatus.PAID, at)

    def mark_failed(self, at: datetime, error_detail: str | None = None):
        """
        Events: PaymentFailed
        """
        self._settle(PaymentStatus.FAILED, at)
        self.error_detail = error_detail or ''

        from apps.payments.domain.events import PaymentFailed

        self.add_event(PaymentFailed(
            aggregate_id=self.id,
            payment_id=self.id,
            booking_id=self.booking_id,
            error_detail=self.error_detail
        ))

    def _settle(self, status: PaymentStatus, at: datetime):
        if self.is_terminal:
            raise DomainError(
                ErrorKind.INVALID_STATUS,
                f"Payment {self.id} is already {self.status.value}"
            )
        self.status = status
        self.settled_at = at

    def __str__(self):
        return f"Payment {self.id} for booking {self.booking_id} ({self.status.value})"
