"""Notification collaborators used after bookings and payments commit."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "ACCEPTED": "Your booking {booking_id} was accepted by the studio.",
    "REJECTED": "Your booking {booking_id} was rejected by the studio.",
    "COMPLETED": "Your booking {booking_id} is complete. Thank you!",
    "CANCELLED": "Your booking {booking_id} was cancelled.",
}


def booking_status_message(booking_id: UUID | str, new_status: str) -> str:
    template = STATUS_MESSAGES.get(new_status, "Your booking {booking_id} is now {status}.")
    return template.format(booking_id=booking_id, status=new_status)


def payment_succeeded_message(booking_id: UUID | str) -> str:
    return f"Payment for booking {booking_id} was received successfully."


class NotificationService(ABC):
    """
    Best-effort: implementations may raise, callers log and carry on.
    """

    @abstractmethod
    def notify_booking_status_changed(self, contact: str, booking_id: UUID, new_status: str) -> None:
        ...

    @abstractmethod
    def notify_payment_succeeded(self, contact: str, booking_id: UUID) -> None:
        ...


class LoggingNotificationService(NotificationService):
    """Writes notifications to the log instead of sending them."""

    def notify_booking_status_changed(self, contact, booking_id, new_status):
        logger.info(f"[notify {contact}] {booking_status_message(booking_id, new_status)}")

    def notify_payment_succeeded(self, contact, booking_id):
        logger.info(f"[notify {contact}] {payment_succeeded_message(booking_id)}")


class SmsNotificationService(NotificationService):
    """Queues an SMS per notification; the Celery task owns retries."""

    def notify_booking_status_changed(self, contact, booking_id, new_status):
        from apps.notifications.tasks import send_sms

        send_sms.delay(contact, booking_status_message(booking_id, new_status))

    def notify_payment_succeeded(self, contact, booking_id):
        from apps.notifications.tasks import send_sms

        send_sms.delay(contact, payment_succeeded_message(booking_id))


def get_notification_service() -> NotificationService:
    backend = getattr(
        settings,
        "NOTIFICATION_BACKEND",
        "apps.notifications.services.LoggingNotificationService",
    )
    return import_string(backend)()
