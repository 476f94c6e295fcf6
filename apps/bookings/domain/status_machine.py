"""
Booking status machine

A single transition table plus a role-keyed authorization predicate.
The table always wins: a transition the table forbids is reported as
INVALID_TRANSITION even for an administrator.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet
from uuid import UUID

from apps.bookings.domain.entities import BookingStatus
from apps.users.roles import UserRole


ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.ACCEPTED,
        BookingStatus.REJECTED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.ACCEPTED: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


class TransitionDecision(Enum):
    ALLOWED = 'allowed'
    FORBIDDEN = 'forbidden'
    INVALID_TRANSITION = 'invalid_transition'


@dataclass(frozen=True)
class BookingStatusContext:
    """What the decision needs to know about the booking"""
    booking_id: UUID
    current_status: BookingStatus
    photographer_id: UUID
    studio_owner_id: UUID | None


def is_transition_allowed(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def evaluate(
    role: UserRole,
    requester_id: UUID,
    context: BookingStatusContext,
    target_status: BookingStatus,
) -> TransitionDecision:
    """
    Decide whether requester may move the booking to target_status

    - ADMIN: any transition the table permits
    - STUDIO_OWNER: only for rooms of a studio they own
    - PHOTOGRAPHER: only their own booking, and only to CANCELLED
    """
    if not is_transition_allowed(context.current_status, target_status):
        return TransitionDecision.INVALID_TRANSITION

    if role == UserRole.ADMIN:
        return TransitionDecision.ALLOWED

    if role == UserRole.STUDIO_OWNER:
        if context.studio_owner_id is not None and context.studio_owner_id == requester_id:
            return TransitionDecision.ALLOWED
        return TransitionDecision.FORBIDDEN

    if role == UserRole.PHOTOGRAPHER:
        if context.photographer_id != requester_id:
            return TransitionDecision.FORBIDDEN
        if target_status == BookingStatus.CANCELLED:
            return TransitionDecision.ALLOWED
        return TransitionDecision.FORBIDDEN

    return TransitionDecision.FORBIDDEN


def can_transition(
    role: UserRole,
    requester_id: UUID,
    context: BookingStatusContext,
    target_status: BookingStatus,
) -> bool:
    return evaluate(role, requester_id, context, target_status) is TransitionDecision.ALLOWED
