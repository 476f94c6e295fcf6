"""
Base Domain Classes

This module provides the foundational building blocks for the reservation engine:
- Entity: Objects with unique identity
- ValueObject: Immutable objects compared by value
- Aggregate: Consistency boundaries with domain events
- DomainEvent: Events that represent something that happened
- ErrorKind / DomainError: the rejection taxonomy shared by all operations
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List
from uuid import UUID, uuid4


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class Entity(ABC):
    """
    Base class for all entities

    Entities have unique identity and are mutable.
    Two entities are equal if their IDs are equal.
    """
    id: UUID = field(default_factory=uuid4)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Base class for aggregate roots

    Aggregates are the consistency boundaries of the engine.
    They collect domain events that will be published after a successful transaction.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False)

    def add_event(self, event: 'DomainEvent'):
        """Add a domain event to be published"""
        self._events.append(event)

    def clear_events(self):
        """Clear all collected events (called after publishing)"""
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Get copy of collected events"""
        return self._events.copy()


@dataclass(kw_only=True)
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are delivered to subscribers only after the transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=_utcnow)
    aggregate_id: UUID | None = None

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': str(self.aggregate_id) if self.aggregate_id else None,
        }


class ErrorKind(Enum):
    """Rejection kinds reported by engine operations."""
    INVALID_RANGE = 'invalid_range'
    START_TOO_FAR_IN_PAST = 'start_too_far_in_past'
    ROOM_NOT_FOUND = 'room_not_found'
    CONFLICT = 'conflict'
    FORBIDDEN = 'forbidden'
    INVALID_TRANSITION = 'invalid_transition'
    INVALID_STATUS = 'invalid_status'
    NOT_FOUND = 'not_found'
    GATEWAY_ERROR = 'gateway_error'
    STORAGE_FAILURE = 'storage_failure'


class DomainError(Exception):
    """
    Raised inside a unit of work to reject an operation

    Raising (rather than returning) makes the surrounding transaction roll back.
    Command handlers catch it at their boundary and turn it into a result object.
    """

    def __init__(self, kind: ErrorKind, message: str = ''):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value
