"""Tests for the booking status machine."""

from __future__ import annotations

from uuid import uuid4

from django.test import SimpleTestCase

from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.status_machine import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    BookingStatusContext,
    TransitionDecision,
    can_transition,
    evaluate,
    is_transition_allowed,
)
from apps.users.roles import UserRole


class StatusMachineTests(SimpleTestCase):

    def setUp(self) -> None:
        self.owner_id = uuid4()
        self.photographer_id = uuid4()
        self.admin_id = uuid4()

    def context(self, current: BookingStatus) -> BookingStatusContext:
        return BookingStatusContext(
            booking_id=uuid4(),
            current_status=current,
            photographer_id=self.photographer_id,
            studio_owner_id=self.owner_id,
        )

    def test_transition_table(self) -> None:
        self.assertEqual(
            ALLOWED_TRANSITIONS[BookingStatus.PENDING],
            {BookingStatus.ACCEPTED, BookingStatus.REJECTED, BookingStatus.CANCELLED},
        )
        self.assertEqual(
            ALLOWED_TRANSITIONS[BookingStatus.ACCEPTED],
            {BookingStatus.COMPLETED, BookingStatus.CANCELLED},
        )
        self.assertEqual(
            TERMINAL_STATUSES,
            {BookingStatus.REJECTED, BookingStatus.COMPLETED, BookingStatus.CANCELLED},
        )

    def test_owning_studio_owner_accepts(self) -> None:
        decision = evaluate(
            UserRole.STUDIO_OWNER, self.owner_id, self.context(BookingStatus.PENDING), BookingStatus.ACCEPTED
        )
        self.assertEqual(decision, TransitionDecision.ALLOWED)

    def test_other_studio_owner_is_forbidden(self) -> None:
        decision = evaluate(
            UserRole.STUDIO_OWNER, uuid4(), self.context(BookingStatus.PENDING), BookingStatus.ACCEPTED
        )
        self.assertEqual(decision, TransitionDecision.FORBIDDEN)

    def test_photographer_cannot_accept(self) -> None:
        decision = evaluate(
            UserRole.PHOTOGRAPHER, self.photographer_id, self.context(BookingStatus.PENDING), BookingStatus.ACCEPTED
        )
        self.assertEqual(decision, TransitionDecision.FORBIDDEN)

    def test_admin_cannot_break_the_table(self) -> None:
        decision = evaluate(
            UserRole.ADMIN, self.admin_id, self.context(BookingStatus.COMPLETED), BookingStatus.ACCEPTED
        )
        self.assertEqual(decision, TransitionDecision.INVALID_TRANSITION)

    def test_own_photographer_cancels(self) -> None:
        decision = evaluate(
            UserRole.PHOTOGRAPHER, self.photographer_id, self.context(BookingStatus.PENDING), BookingStatus.CANCELLED
        )
        self.assertEqual(decision, TransitionDecision.ALLOWED)

    def test_other_photographer_cannot_cancel(self) -> None:
        decision = evaluate(
            UserRole.PHOTOGRAPHER, uuid4(), self.context(BookingStatus.PENDING), BookingStatus.CANCELLED
        )
        self.assertEqual(decision, TransitionDecision.FORBIDDEN)

    def test_table_wins_over_entitlement(self) -> None:
        decision = evaluate(
            UserRole.STUDIO_OWNER, self.owner_id, self.context(BookingStatus.CANCELLED), BookingStatus.ACCEPTED
        )
        self.assertEqual(decision, TransitionDecision.INVALID_TRANSITION)

    def test_admin_may_follow_any_table_edge(self) -> None:
        for current, targets in ALLOWED_TRANSITIONS.items():
            for target in targets:
                with self.subTest(current=current, target=target):
                    self.assertTrue(can_transition(UserRole.ADMIN, self.admin_id, self.context(current), target))

    def test_terminal_states_have_no_exit(self) -> None:
        for current in TERMINAL_STATUSES:
            for target in BookingStatus:
                self.assertFalse(is_transition_allowed(current, target))

    def test_owner_of_unknown_studio_is_forbidden(self) -> None:
        context = BookingStatusContext(
            booking_id=uuid4(),
            current_status=BookingStatus.PENDING,
            photographer_id=self.photographer_id,
            studio_owner_id=None,
        )
        decision = evaluate(UserRole.STUDIO_OWNER, self.owner_id, context, BookingStatus.ACCEPTED)
        self.assertEqual(decision, TransitionDecision.FORBIDDEN)
