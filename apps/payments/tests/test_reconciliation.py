"""Reconciliation and initiation tests against the in-memory store."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from django.test import SimpleTestCase

from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import BookingPaid
from apps.notifications.handlers import NotificationHandlers, register_handlers
from apps.notifications.services import NotificationService
from apps.payments.application.command_handlers import (
    GatewayOutcome,
    InitiatePaymentCommand,
    InitiatePaymentHandler,
    ReconcilePaymentHandler,
)
from apps.payments.domain.entities import PaymentGateway
from apps.payments.domain.events import PaymentFailed
from apps.payments.gateways import GatewayError, SandboxGatewayService
from shared.application.clock import FixedClock
from shared.application.message_bus import MessageBus
from shared.domain.base import ErrorKind
from shared.testing import InMemoryStore

NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return NOW.replace(hour=hour, minute=minute)


class RecordingNotificationService(NotificationService):

    def __init__(self):
        self.sent = []

    def notify_booking_status_changed(self, contact, booking_id, new_status):
        self.sent.append(("status", contact, booking_id, new_status))

    def notify_payment_succeeded(self, contact, booking_id):
        self.sent.append(("paid", contact, booking_id))


class RefusingGateway(SandboxGatewayService):

    def create_payment(self, payment_id, booking_id, amount, gateway):
        raise GatewayError("Gateway unavailable")


class CrashingGateway(SandboxGatewayService):

    def create_payment(self, payment_id, booking_id, amount, gateway):
        raise RuntimeError("connection reset")


class ReconcilePaymentHandlerTests(SimpleTestCase):

    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.bus = MessageBus()
        self.notifications = RecordingNotificationService()
        register_handlers(self.bus, NotificationHandlers(self.notifications))

        self.photographer_id = self.store.add_user("+15550000002")
        room = self.store.add_room(self.store.add_user())
        self.booking = self.store.add_booking(
            room,
            self.photographer_id,
            at(10),
            at(11, 30),
            status=BookingStatus.ACCEPTED,
            total=Decimal("200000.00"),
        )
        self.record = self.store.add_payment(self.booking, "REF-1")
        self.clock = FixedClock(NOW)
        self.handler = ReconcilePaymentHandler(uow_factory=self.store.uow_factory(self.bus), clock=self.clock)

    def callback(self, success=True, ref="REF-1", detail=None):
        return self.handler.handle(GatewayOutcome(external_ref=ref, success=success, error_detail=detail))

    def stored_booking(self):
        return self.store.bookings[self.booking.id]

    def stored_record(self):
        return self.store.payments[self.record.id]

    def test_success_settles_record_and_booking(self) -> None:
        result = self.callback()

        self.assertTrue(result.paid)
        self.assertFalse(result.replayed)
        self.assertEqual(result.contact, "+15550000002")
        self.assertEqual(self.stored_record().status, PaymentStatus.PAID)
        self.assertEqual(self.stored_record().settled_at, NOW)
        self.assertEqual(self.stored_booking().payment_status, PaymentStatus.PAID)
        self.assertEqual(self.stored_booking().status, BookingStatus.ACCEPTED)

    def test_success_notifies_once(self) -> None:
        self.callback()

        self.assertEqual(self.notifications.sent, [("paid", "+15550000002", self.booking.id)])
        self.assertEqual([type(event) for event in self.store.published], [BookingPaid])

    def test_replayed_success_is_a_no_op(self) -> None:
        self.callback()
        commits = self.store.commits

        replay = self.callback()

        self.assertTrue(replay.ok)
        self.assertTrue(replay.replayed)
        self.assertTrue(replay.paid)
        self.assertEqual(len(self.notifications.sent), 1)
        self.assertEqual(len(self.store.published), 1)
        self.assertEqual(self.store.commits, commits + 1)

    def test_failure_keeps_booking_payment_pending(self) -> None:
        result = self.callback(success=False, detail="Card declined")

        self.assertTrue(result.ok)
        self.assertEqual(result.payment_status, PaymentStatus.FAILED)
        self.assertEqual(self.stored_record().error_detail, "Card declined")
        self.assertEqual(self.stored_booking().payment_status, PaymentStatus.PENDING)
        self.assertEqual(self.notifications.sent, [])
        self.assertEqual([type(event) for event in self.store.published], [PaymentFailed])

    def test_success_after_failure_changes_nothing(self) -> None:
        self.callback(success=False)

        result = self.callback(success=True)

        self.assertTrue(result.replayed)
        self.assertEqual(result.payment_status, PaymentStatus.FAILED)
        self.assertEqual(self.stored_booking().payment_status, PaymentStatus.PENDING)

    def test_unknown_reference_is_not_found(self) -> None:
        result = self.callback(ref="REF-404")

        self.assertEqual(result.error, ErrorKind.NOT_FOUND)
        self.assertEqual(self.stored_record().status, PaymentStatus.PENDING)

    def test_storage_failure_settles_nothing(self) -> None:
        self.store.failing_commits = {1}

        with self.assertLogs("apps.payments.application.command_handlers", level="ERROR"):
            result = self.callback()

        self.assertEqual(result.error, ErrorKind.STORAGE_FAILURE)
        self.assertEqual(self.stored_record().status, PaymentStatus.PENDING)
        self.assertEqual(self.stored_booking().payment_status, PaymentStatus.PENDING)
        self.assertEqual(self.store.published, [])
        self.assertEqual(self.notifications.sent, [])

        retry = self.callback()

        self.assertTrue(retry.paid)
        self.assertFalse(retry.replayed)

    def test_missing_contact_still_settles(self) -> None:
        silent = self.store.add_user(None)
        booking = self.store.add_booking(self.store.rooms[self.booking.room_id], silent, at(14), at(15))
        self.store.add_payment(booking, "REF-2")

        with self.assertLogs("apps.notifications.handlers", level="WARNING"):
            result = self.callback(ref="REF-2")

        self.assertTrue(result.paid)
        self.assertIsNone(result.contact)
        self.assertEqual(self.notifications.sent, [])


class InitiatePaymentHandlerTests(SimpleTestCase):

    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.photographer_id = self.store.add_user()
        room = self.store.add_room(self.store.add_user())
        self.booking = self.store.add_booking(
            room, self.photographer_id, at(10), at(11, 30), total=Decimal("200000.00")
        )
        self.clock = FixedClock(NOW)

    def initiate(self, gateway=None, requester_id=None, booking_id=None):
        handler = InitiatePaymentHandler(
            uow_factory=self.store.uow_factory(),
            gateway=gateway or SandboxGatewayService(base_url="https://gateway.test/"),
            clock=self.clock,
        )
        return handler.handle(InitiatePaymentCommand(
            booking_id=booking_id or self.booking.id,
            requester_id=requester_id or self.photographer_id,
        ))

    def test_opens_pending_record_with_checkout(self) -> None:
        result = self.initiate()

        self.assertTrue(result.ok, result.message)
        self.assertEqual(result.payment_url, f"https://gateway.test/pay/{self.booking.id}")
        stored = self.store.payments[result.payment.id]
        self.assertEqual(stored.status, PaymentStatus.PENDING)
        self.assertEqual(stored.amount.amount, Decimal("200000.00"))
        self.assertEqual(stored.external_ref, f"SANDBOX-{result.payment.id}")

    def test_other_photographer_is_forbidden(self) -> None:
        result = self.initiate(requester_id=uuid4())

        self.assertEqual(result.error, ErrorKind.FORBIDDEN)
        self.assertEqual(self.store.payments, {})

    def test_unknown_booking_is_not_found(self) -> None:
        result = self.initiate(booking_id=uuid4())
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_second_initiation_while_pending_conflicts(self) -> None:
        self.initiate()

        result = self.initiate()

        self.assertEqual(result.error, ErrorKind.CONFLICT)
        self.assertEqual(len(self.store.payments), 1)

    def test_paid_booking_is_invalid_status(self) -> None:
        first = self.initiate()
        ReconcilePaymentHandler(uow_factory=self.store.uow_factory(), clock=self.clock).handle(
            GatewayOutcome(external_ref=first.payment.external_ref, success=True)
        )

        result = self.initiate()

        self.assertEqual(result.error, ErrorKind.INVALID_STATUS)

    def test_gateway_refusal_marks_record_failed(self) -> None:
        with self.assertLogs("apps.payments.application.command_handlers", level="ERROR"):
            result = self.initiate(gateway=RefusingGateway())

        self.assertEqual(result.error, ErrorKind.GATEWAY_ERROR)
        [record] = self.store.payments.values()
        self.assertEqual(record.status, PaymentStatus.FAILED)
        self.assertEqual(record.error_detail, "Gateway unavailable")

    def test_unexpected_gateway_error_marks_record_failed(self) -> None:
        with self.assertLogs("apps.payments.application.command_handlers", level="ERROR"):
            result = self.initiate(gateway=CrashingGateway())

        self.assertEqual(result.error, ErrorKind.GATEWAY_ERROR)
        [record] = self.store.payments.values()
        self.assertEqual(record.status, PaymentStatus.FAILED)
        self.assertTrue(self.initiate().ok)

    def test_checkout_storage_failure_releases_booking(self) -> None:
        # commit 1 opens the record, commit 2 stores the checkout
        self.store.failing_commits = {2}

        with self.assertLogs("apps.payments.application.command_handlers", level="ERROR"):
            result = self.initiate()

        self.assertEqual(result.error, ErrorKind.STORAGE_FAILURE)
        [record] = self.store.payments.values()
        self.assertEqual(record.status, PaymentStatus.FAILED)

        retry = self.initiate()

        self.assertTrue(retry.ok, retry.message)
        self.assertEqual(self.store.payments[retry.payment.id].status, PaymentStatus.PENDING)

    def test_retry_after_failed_attempt_is_allowed(self) -> None:
        first = self.initiate()
        ReconcilePaymentHandler(uow_factory=self.store.uow_factory(), clock=self.clock).handle(
            GatewayOutcome(external_ref=first.payment.external_ref, success=False)
        )

        retry = self.initiate()

        self.assertTrue(retry.ok, retry.message)
        self.assertNotEqual(retry.payment.external_ref, first.payment.external_ref)


class SandboxGatewayTests(SimpleTestCase):

    def setUp(self) -> None:
        self.gateway = SandboxGatewayService(base_url="https://gateway.test")

    def test_successful_callback(self) -> None:
        verification = self.gateway.verify_payment(
            PaymentGateway.ZARINPAL, {"Status": "OK", "Authority": "SANDBOX-1", "Amount": "200000"}
        )

        self.assertTrue(verification.success)
        self.assertEqual(verification.external_ref, "SANDBOX-1")
        self.assertEqual(verification.amount, 200000)
        self.assertIsNone(verification.error_message)

    def test_failed_callback_has_default_message(self) -> None:
        verification = self.gateway.verify_payment(PaymentGateway.IDPAY, {"Status": "NOK", "RefId": "X", "Amount": "?"})

        self.assertFalse(verification.success)
        self.assertEqual(verification.external_ref, "X")
        self.assertIsNone(verification.amount)
        self.assertEqual(verification.error_message, "Payment verification failed")
