"""Admission tests run against the in-memory store."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from django.test import SimpleTestCase, override_settings

from apps.bookings.application.command_handlers import (
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import BookingCreated
from shared.application.clock import FixedClock
from shared.domain.base import ErrorKind
from shared.testing import InMemoryStore

NOW = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return NOW.replace(hour=hour, minute=minute)


class CreateBookingHandlerTests(SimpleTestCase):

    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.owner_id = self.store.add_user("+15550000001")
        self.photographer_id = self.store.add_user("+15550000002")
        self.room = self.store.add_room(self.owner_id, hourly_price=100000)
        self.clock = FixedClock(NOW)
        self.handler = CreateBookingHandler(uow_factory=self.store.uow_factory(), clock=self.clock)

    def book(self, start: datetime, end: datetime, **kwargs):
        command = CreateBookingCommand(
            room_id=kwargs.pop("room_id", self.room.id),
            requester_id=kwargs.pop("requester_id", self.photographer_id),
            start=start,
            end=end,
            **kwargs,
        )
        return self.handler.handle(command)

    def test_admits_pending_booking_with_price(self) -> None:
        result = self.book(at(10), at(11, 30))

        self.assertTrue(result.ok, result.message)
        booking = result.booking
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.payment_status, PaymentStatus.PENDING)
        self.assertEqual(booking.total_price.amount, Decimal("200000.00"))
        self.assertEqual(booking.created_at, NOW)
        self.assertIn(booking.id, self.store.bookings)

    def test_publishes_booking_created(self) -> None:
        result = self.book(at(10), at(11))

        self.assertEqual(len(self.store.published), 1)
        event = self.store.published[0]
        self.assertIsInstance(event, BookingCreated)
        self.assertEqual(event.booking_id, result.booking.id)

    def test_start_after_end_is_invalid_range(self) -> None:
        result = self.book(at(11), at(10))

        self.assertEqual(result.error, ErrorKind.INVALID_RANGE)
        self.assertEqual(self.store.bookings, {})
        self.assertEqual(self.store.commits, 0)

    def test_empty_range_is_invalid(self) -> None:
        result = self.book(at(10), at(10))
        self.assertEqual(result.error, ErrorKind.INVALID_RANGE)

    def test_start_within_grace_is_accepted(self) -> None:
        result = self.book(NOW - timedelta(minutes=10), NOW + timedelta(hours=1))
        self.assertTrue(result.ok, result.message)

    def test_start_beyond_grace_is_rejected(self) -> None:
        result = self.book(NOW - timedelta(minutes=11), NOW + timedelta(hours=1))

        self.assertEqual(result.error, ErrorKind.START_TOO_FAR_IN_PAST)
        self.assertEqual(self.store.bookings, {})

    @override_settings(BOOKING_PAST_GRACE_MINUTES=30)
    def test_grace_window_is_configurable(self) -> None:
        result = self.book(NOW - timedelta(minutes=20), NOW + timedelta(hours=1))
        self.assertTrue(result.ok, result.message)

    def test_unknown_room(self) -> None:
        result = self.book(at(10), at(11), room_id=uuid4())

        self.assertEqual(result.error, ErrorKind.ROOM_NOT_FOUND)
        self.assertEqual(self.store.published, [])

    def test_overlap_with_pending_booking_conflicts(self) -> None:
        self.store.add_booking(self.room, uuid4(), at(10), at(12))

        result = self.book(at(11), at(13))

        self.assertEqual(result.error, ErrorKind.CONFLICT)
        self.assertEqual(len(self.store.bookings), 1)

    def test_overlap_with_accepted_booking_conflicts(self) -> None:
        self.store.add_booking(self.room, uuid4(), at(10), at(12), status=BookingStatus.ACCEPTED)

        result = self.book(at(9), at(10, 30))

        self.assertEqual(result.error, ErrorKind.CONFLICT)

    def test_finished_bookings_free_the_calendar(self) -> None:
        for status in (BookingStatus.REJECTED, BookingStatus.CANCELLED, BookingStatus.COMPLETED):
            self.store.add_booking(self.room, uuid4(), at(10), at(12), status=status)

        result = self.book(at(10), at(12))

        self.assertTrue(result.ok, result.message)

    def test_back_to_back_bookings_are_allowed(self) -> None:
        self.store.add_booking(self.room, uuid4(), at(10), at(12))

        before = self.book(at(9), at(10))
        after = self.book(at(12), at(13))

        self.assertTrue(before.ok, before.message)
        self.assertTrue(after.ok, after.message)

    def test_other_rooms_do_not_conflict(self) -> None:
        other_room = self.store.add_room(self.owner_id)
        self.store.add_booking(other_room, uuid4(), at(10), at(12))

        result = self.book(at(10), at(12))

        self.assertTrue(result.ok, result.message)

    def test_storage_failure_admits_nothing(self) -> None:
        self.store.failing_commits = {1}

        with self.assertLogs("apps.bookings.application.command_handlers", level="ERROR"):
            result = self.book(at(10), at(11))

        self.assertEqual(result.error, ErrorKind.STORAGE_FAILURE)
        self.assertIsNone(result.booking)
        self.assertEqual(self.store.bookings, {})
        self.assertEqual(self.store.published, [])
        self.assertTrue(self.book(at(10), at(11)).ok)

    def test_equipment_ids_are_normalized(self) -> None:
        result = self.book(at(10), at(11), equipment_ids=[" light-2 ", "light-1", "", "light-2"])

        self.assertEqual(result.booking.equipment_ids, ("light-1", "light-2"))

    def test_concurrent_overlapping_requests_admit_exactly_one(self) -> None:
        barrier = threading.Barrier(2)
        results = []

        def attempt(start: datetime, end: datetime) -> None:
            handler = CreateBookingHandler(uow_factory=self.store.uow_factory(), clock=self.clock)
            command = CreateBookingCommand(
                room_id=self.room.id,
                requester_id=uuid4(),
                start=start,
                end=end,
            )
            barrier.wait()
            results.append(handler.handle(command))

        threads = [
            threading.Thread(target=attempt, args=(at(10), at(12))),
            threading.Thread(target=attempt, args=(at(11), at(13))),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(result.ok for result in results), [False, True])
        rejected = next(result for result in results if not result.ok)
        self.assertEqual(rejected.error, ErrorKind.CONFLICT)
        self.assertEqual(len(self.store.blocking_bookings(self.room.id)), 1)
