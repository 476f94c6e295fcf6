"""Notification subscriber tests."""

from __future__ import annotations

from unittest.mock import MagicMock, patch
from uuid import uuid4

from django.test import SimpleTestCase, override_settings

from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.events import BookingPaid, BookingStatusChanged
from apps.notifications.handlers import NotificationHandlers, register_handlers
from apps.notifications.services import (
    LoggingNotificationService,
    SmsNotificationService,
    booking_status_message,
    get_notification_service,
)
from shared.application.message_bus import MessageBus


def status_changed(contact="+15550000002"):
    booking_id = uuid4()
    return BookingStatusChanged(
        aggregate_id=booking_id,
        booking_id=booking_id,
        old_status=BookingStatus.PENDING,
        new_status=BookingStatus.ACCEPTED,
        photographer_id=uuid4(),
        contact=contact,
    )


def paid(contact="+15550000002"):
    booking_id = uuid4()
    return BookingPaid(
        aggregate_id=booking_id,
        booking_id=booking_id,
        payment_id=uuid4(),
        photographer_id=uuid4(),
        contact=contact,
    )


class NotificationHandlersTests(SimpleTestCase):

    def setUp(self) -> None:
        self.service = MagicMock()
        self.bus = MessageBus()
        register_handlers(self.bus, NotificationHandlers(self.service))

    def test_status_change_is_delivered(self) -> None:
        event = status_changed()

        self.bus.publish_events([event])

        self.service.notify_booking_status_changed.assert_called_once_with(
            "+15550000002", event.booking_id, "ACCEPTED"
        )

    def test_payment_success_is_delivered(self) -> None:
        event = paid()

        self.bus.publish_events([event])

        self.service.notify_payment_succeeded.assert_called_once_with("+15550000002", event.booking_id)

    def test_missing_contact_is_skipped(self) -> None:
        with self.assertLogs("apps.notifications.handlers", level="WARNING"):
            self.bus.publish_events([status_changed(contact=None), paid(contact="")])

        self.service.notify_booking_status_changed.assert_not_called()
        self.service.notify_payment_succeeded.assert_not_called()

    def test_delivery_failure_is_contained_by_the_bus(self) -> None:
        self.service.notify_payment_succeeded.side_effect = RuntimeError("SMS provider down")

        with self.assertLogs("shared.application.message_bus", level="ERROR"):
            self.bus.publish_events([paid()])

    def test_registration_is_idempotent(self) -> None:
        handlers = NotificationHandlers(self.service)
        bus = MessageBus()
        register_handlers(bus, handlers)
        register_handlers(bus, handlers)

        self.assertEqual(len(bus.handlers_for(BookingPaid)), 1)


class NotificationServiceTests(SimpleTestCase):

    def test_status_message(self) -> None:
        self.assertEqual(
            booking_status_message("b-1", "REJECTED"),
            "Your booking b-1 was rejected by the studio.",
        )
        self.assertEqual(booking_status_message("b-1", "PENDING"), "Your booking b-1 is now PENDING.")

    @override_settings(NOTIFICATION_BACKEND="apps.notifications.services.SmsNotificationService")
    def test_backend_is_configurable(self) -> None:
        self.assertIsInstance(get_notification_service(), SmsNotificationService)

    def test_default_backend_logs(self) -> None:
        with self.assertLogs("apps.notifications.services", level="INFO") as logs:
            get_notification_service().notify_payment_succeeded("+15550000002", "b-1")

        self.assertIsInstance(get_notification_service(), LoggingNotificationService)
        self.assertIn("+15550000002", logs.output[0])

    def test_sms_service_queues_task(self) -> None:
        with patch("apps.notifications.tasks.send_sms.delay") as delay:
            SmsNotificationService().notify_booking_status_changed("+15550000002", "b-1", "ACCEPTED")

        delay.assert_called_once_with("+15550000002", "Your booking b-1 was accepted by the studio.")
