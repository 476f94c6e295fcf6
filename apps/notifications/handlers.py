"""
Message bus subscribers delivering notifications

They run after the producing transaction has committed. A missing
contact is skipped; delivery errors propagate to the bus, which logs
them and moves on, so they can never undo a booking or payment.
"""

from __future__ import annotations

import logging

from shared.application.message_bus import MessageBus, message_bus
from apps.bookings.domain.events import BookingPaid, BookingStatusChanged
from apps.notifications.services import NotificationService, get_notification_service

logger = logging.getLogger(__name__)


class NotificationHandlers:

    def __init__(self, service: NotificationService | None = None):
        self._service = service

    @property
    def service(self) -> NotificationService:
        return self._service or get_notification_service()

    def on_booking_status_changed(self, event: BookingStatusChanged):
        if not event.contact:
            logger.warning(f"No contact for booking {event.booking_id}, skipping status notification")
            return
        self.service.notify_booking_status_changed(event.contact, event.booking_id, event.new_status.value)

    def on_booking_paid(self, event: BookingPaid):
        if not event.contact:
            logger.warning(
                f"Skipping payment success notification for booking {event.booking_id}: "
                f"photographer phone number not found"
            )
            return
        self.service.notify_payment_succeeded(event.contact, event.booking_id)


default_handlers = NotificationHandlers()


def register_handlers(bus: MessageBus | None = None, handlers: NotificationHandlers | None = None):
    bus = bus or message_bus
    handlers = handlers or default_handlers
    bus.register_event_handler(BookingStatusChanged, handlers.on_booking_status_changed)
    bus.register_event_handler(BookingPaid, handlers.on_booking_paid)
