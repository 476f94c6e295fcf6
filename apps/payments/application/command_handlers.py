"""
Payment Command Handlers

Commands:
- InitiatePaymentCommand: open a gateway checkout for a booking
- GatewayOutcome: a gateway callback, reconciled exactly once

Exactly-once reconciliation rests on the terminal-state check made while
the payment row is locked, not on deduplicating callbacks upstream.
"""

from dataclasses import dataclass
from typing import Callable
from uuid import UUID
import logging

from django.db import DatabaseError, IntegrityError  # type: ignore

from shared.application.clock import Clock, SystemClock
from shared.application.locks import payment_locks, serialize_unless_row_locking
from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.base import DomainError, ErrorKind
from apps.bookings.domain.entities import PaymentStatus
from apps.bookings.domain.pricing import to_gateway_amount
from apps.payments.domain.entities import PaymentGateway, PaymentRecord
from apps.payments.gateways import GatewayError, PaymentGatewayService, get_payment_gateway

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class InitiatePaymentCommand:
    booking_id: UUID
    requester_id: UUID
    gateway: PaymentGateway = PaymentGateway.ZARINPAL


@dataclass
class GatewayOutcome:
    """What the gateway reported for one external reference"""
    external_ref: str
    success: bool
    error_detail: str | None = None


# ===== Results =====

@dataclass
class InitiationResult:
    payment: PaymentRecord | None = None
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def payment_url(self) -> str | None:
        return self.payment.payment_url if self.payment else None


@dataclass
class ReconciliationResult:
    """
    booking_id and contact are set when this call settled a successful
    payment; replayed is True when the record was already terminal.
    """
    payment_status: PaymentStatus | None = None
    booking_id: UUID | None = None
    contact: str | None = None
    replayed: bool = False
    error: ErrorKind | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID


# ===== Command Handlers =====

class InitiatePaymentHandler:
    """
    Handler for InitiatePayment command

    1. In one transaction (booking row locked): ownership, booking payment
       status and "no other active record" checks, then insert a PENDING
       record for the booking total
    2. Ask the gateway for a checkout (outside any transaction)
    3. In a second transaction: store the checkout
    Any failure after step 1 marks the record FAILED, so a new attempt
    is never blocked by a PENDING record no callback can reach.
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        gateway: PaymentGatewayService | None = None,
        clock: Clock | None = None,
    ):
        self.uow_factory = uow_factory
        self.gateway = gateway or get_payment_gateway()
        self.clock = clock or SystemClock()

    def handle(self, command: InitiatePaymentCommand) -> InitiationResult:
        logger.info(
            f"Initiating {command.gateway.value} payment for booking {command.booking_id} "
            f"by {command.requester_id}"
        )

        uow = self.uow_factory()
        try:
            with serialize_unless_row_locking(uow, payment_locks, command.booking_id):
                with uow:
                    record = self._open_record(uow, command)
        except DomainError as e:
            logger.warning(f"Payment initiation for booking {command.booking_id} rejected ({e.kind.value}): {e.message}")
            return InitiationResult(error=e.kind, message=e.message)
        except IntegrityError as e:
            # Lost the race against a concurrent initiation for the same booking
            logger.warning(f"Concurrent payment initiation for booking {command.booking_id}: {e}")
            return InitiationResult(error=ErrorKind.CONFLICT, message="A payment is already in progress for this booking")
        except DatabaseError as e:
            logger.error(f"Storage failure while initiating payment for booking {command.booking_id}: {e}", exc_info=True)
            return InitiationResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        try:
            checkout = self.gateway.create_payment(
                payment_id=str(record.id),
                booking_id=str(record.booking_id),
                amount=to_gateway_amount(record.amount.amount),
                gateway=record.gateway,
            )
        except GatewayError as e:
            logger.error(f"Gateway refused payment {record.id}: {e}", exc_info=True)
            return self._abandon(record, str(e))
        except Exception as e:
            # The PENDING record is already committed and must not outlive a failed checkout
            logger.error(f"Unexpected gateway failure for payment {record.id}: {e}", exc_info=True)
            return self._abandon(record, f"Payment gateway error: {e}")

        try:
            with self.uow_factory() as uow:
                record.attach_checkout(checkout.payment_url, checkout.external_ref)
                uow.payments.update(record)
        except DatabaseError as e:
            logger.error(f"Storage failure while saving checkout of payment {record.id}: {e}", exc_info=True)
            abandoned = self._abandon(record, "Checkout could not be stored")
            if abandoned.error is ErrorKind.STORAGE_FAILURE:
                return abandoned
            return InitiationResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        logger.info(f"Payment {record.id} opened with external ref {record.external_ref}")
        return InitiationResult(payment=record)

    def _open_record(self, uow, command: InitiatePaymentCommand) -> PaymentRecord:
        booking = uow.bookings.get(command.booking_id, lock=True)
        if booking is None:
            raise DomainError(ErrorKind.NOT_FOUND, f"Booking {command.booking_id} not found")

        if booking.photographer_id != command.requester_id:
            raise DomainError(ErrorKind.FORBIDDEN, "Booking does not belong to the current user")

        if booking.payment_status != PaymentStatus.PENDING:
            raise DomainError(ErrorKind.INVALID_STATUS, "Booking is not pending payment")

        if uow.payments.find_active_for_booking(booking.id) is not None:
            raise DomainError(ErrorKind.CONFLICT, "A payment is already in progress for this booking")

        record = PaymentRecord(
            booking_id=booking.id,
            amount=booking.total_price,
            gateway=command.gateway,
            created_at=self.clock.now(),
        )
        uow.payments.add(record)
        return record

    def _abandon(self, record: PaymentRecord, detail: str) -> InitiationResult:
        try:
            with self.uow_factory() as uow:
                record.mark_failed(self.clock.now(), detail)
                uow.collect_events(record)
                uow.payments.update(record)
        except DatabaseError as e:
            logger.error(f"Storage failure while abandoning payment {record.id}: {e}", exc_info=True)
            return InitiationResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))
        return InitiationResult(error=ErrorKind.GATEWAY_ERROR, message=detail or "Payment gateway error")


class ReconcilePaymentHandler:
    """
    Handler for gateway callbacks

    - unknown external ref: NOT_FOUND, nothing touched
    - record already PAID/FAILED: no-op success, replayed=True
    - success: record PAID, booking payment PAID, BookingPaid published
      after commit for the notification collaborator
    - failure: record FAILED, booking payment left PENDING so the
      photographer can retry
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        clock: Clock | None = None,
    ):
        self.uow_factory = uow_factory
        self.clock = clock or SystemClock()

    def handle(self, outcome: GatewayOutcome) -> ReconciliationResult:
        logger.info(f"Reconciling callback for {outcome.external_ref} (success={outcome.success})")

        uow = self.uow_factory()
        try:
            with serialize_unless_row_locking(uow, payment_locks, outcome.external_ref):
                with uow:
                    result = self._reconcile(uow, outcome)
        except DomainError as e:
            logger.warning(f"Callback for {outcome.external_ref} rejected ({e.kind.value}): {e.message}")
            return ReconciliationResult(error=e.kind, message=e.message)
        except DatabaseError as e:
            logger.error(f"Storage failure while reconciling {outcome.external_ref}: {e}", exc_info=True)
            return ReconciliationResult(error=ErrorKind.STORAGE_FAILURE, message=str(e))

        if result.replayed:
            logger.info(f"Callback for {outcome.external_ref} replayed, payment already {result.payment_status.value}")
        else:
            logger.info(f"Payment {outcome.external_ref} settled as {result.payment_status.value}")
        return result

    def _reconcile(self, uow, outcome: GatewayOutcome) -> ReconciliationResult:
        record = uow.payments.get_by_external_ref(outcome.external_ref, lock=True)
        if record is None:
            raise DomainError(ErrorKind.NOT_FOUND, "Payment record not found")

        if record.is_terminal:
            return ReconciliationResult(
                payment_status=record.status,
                booking_id=record.booking_id,
                replayed=True,
            )

        now = self.clock.now()

        if not outcome.success:
            record.mark_failed(now, outcome.error_detail)
            uow.collect_events(record)
            uow.payments.update(record)
            return ReconciliationResult(payment_status=record.status, booking_id=record.booking_id)

        booking = uow.bookings.get(record.booking_id, lock=True)
        if booking is None:
            raise DomainError(ErrorKind.NOT_FOUND, f"Booking {record.booking_id} not found")

        contact = uow.users.get_contact(booking.photographer_id)

        record.mark_paid(now)
        booking.mark_paid(record.id, contact=contact)

        uow.collect_events(record)
        uow.collect_events(booking)
        uow.payments.update(record)
        uow.bookings.update(booking)

        return ReconciliationResult(
            payment_status=record.status,
            booking_id=booking.id,
            contact=contact,
        )
