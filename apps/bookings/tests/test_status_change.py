"""Status change tests run against the in-memory store."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from django.test import SimpleTestCase

from apps.bookings.application.command_handlers import (
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
)
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.events import BookingStatusChanged
from apps.users.roles import UserRole
from shared.domain.base import ErrorKind
from shared.testing import InMemoryStore


def at(hour: int) -> datetime:
    return datetime(2025, 3, 10, hour, tzinfo=timezone.utc)


class ChangeBookingStatusHandlerTests(SimpleTestCase):

    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.owner_id = self.store.add_user("+15550000001")
        self.photographer_id = self.store.add_user("+15550000002")
        self.room = self.store.add_room(self.owner_id)
        self.booking = self.store.add_booking(self.room, self.photographer_id, at(10), at(12))
        self.handler = ChangeBookingStatusHandler(uow_factory=self.store.uow_factory())

    def change(self, requester_id, role, target, booking_id=None):
        return self.handler.handle(ChangeBookingStatusCommand(
            booking_id=booking_id or self.booking.id,
            requester_id=requester_id,
            role=role,
            target_status=target,
        ))

    def stored_status(self) -> BookingStatus:
        return self.store.bookings[self.booking.id].status

    def test_owner_accepts(self) -> None:
        result = self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.ACCEPTED)

        self.assertTrue(result.ok, result.message)
        self.assertEqual(result.booking.status, BookingStatus.ACCEPTED)
        self.assertEqual(self.stored_status(), BookingStatus.ACCEPTED)

    def test_event_carries_photographer_contact(self) -> None:
        self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.REJECTED)

        [event] = self.store.published
        self.assertIsInstance(event, BookingStatusChanged)
        self.assertEqual(event.old_status, BookingStatus.PENDING)
        self.assertEqual(event.new_status, BookingStatus.REJECTED)
        self.assertEqual(event.contact, "+15550000002")

    def test_missing_contact_is_none_on_event(self) -> None:
        silent = self.store.add_user(None)
        booking = self.store.add_booking(self.room, silent, at(14), at(15))

        self.change(silent, UserRole.PHOTOGRAPHER, BookingStatus.CANCELLED, booking_id=booking.id)

        [event] = self.store.published
        self.assertIsNone(event.contact)

    def test_other_owner_is_forbidden(self) -> None:
        result = self.change(uuid4(), UserRole.STUDIO_OWNER, BookingStatus.ACCEPTED)

        self.assertEqual(result.error, ErrorKind.FORBIDDEN)
        self.assertEqual(self.stored_status(), BookingStatus.PENDING)
        self.assertEqual(self.store.published, [])

    def test_photographer_may_only_cancel(self) -> None:
        accept = self.change(self.photographer_id, UserRole.PHOTOGRAPHER, BookingStatus.ACCEPTED)
        cancel = self.change(self.photographer_id, UserRole.PHOTOGRAPHER, BookingStatus.CANCELLED)

        self.assertEqual(accept.error, ErrorKind.FORBIDDEN)
        self.assertTrue(cancel.ok, cancel.message)
        self.assertEqual(self.stored_status(), BookingStatus.CANCELLED)

    def test_unknown_role_is_forbidden(self) -> None:
        result = self.change(self.owner_id, None, BookingStatus.ACCEPTED)
        self.assertEqual(result.error, ErrorKind.FORBIDDEN)

    def test_invalid_transition_even_for_admin(self) -> None:
        self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.ACCEPTED)
        self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.COMPLETED)

        result = self.change(uuid4(), UserRole.ADMIN, BookingStatus.ACCEPTED)

        self.assertEqual(result.error, ErrorKind.INVALID_TRANSITION)
        self.assertEqual(self.stored_status(), BookingStatus.COMPLETED)

    def test_unknown_booking(self) -> None:
        result = self.change(self.owner_id, UserRole.ADMIN, BookingStatus.ACCEPTED, booking_id=uuid4())
        self.assertEqual(result.error, ErrorKind.NOT_FOUND)

    def test_full_lifecycle_publishes_one_event_per_step(self) -> None:
        self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.ACCEPTED)
        self.change(self.owner_id, UserRole.STUDIO_OWNER, BookingStatus.COMPLETED)

        self.assertEqual(
            [(event.old_status, event.new_status) for event in self.store.published],
            [
                (BookingStatus.PENDING, BookingStatus.ACCEPTED),
                (BookingStatus.ACCEPTED, BookingStatus.COMPLETED),
            ],
        )
