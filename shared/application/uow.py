"""
Unit of Work

The engine's only way to reach persistence. Every check-then-write
(conflict check + insert, custody check + log append, terminal check +
settlement) runs as the body of one `with uow:` block: a DomainError
raised inside rolls the whole block back.

Events collected during the block reach the message bus only once the
transaction has committed.
"""

from abc import ABC, abstractmethod
from functools import partial
from typing import List
import logging

from django.db import DEFAULT_DB_ALIAS, connections, transaction  # type: ignore

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class AbstractUnitOfWork(ABC):
    """
    Transaction boundary plus the repositories reachable inside it

    Implementations bind:
        rooms, bookings, users, equipment, equipment_logs, payments
    """

    rooms = None
    bookings = None
    users = None
    equipment = None
    equipment_logs = None
    payments = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @property
    def supports_row_locking(self) -> bool:
        """True when repositories honour lock=True with real row locks"""
        return False

    @abstractmethod
    def commit(self):
        ...

    @abstractmethod
    def rollback(self):
        ...

    @abstractmethod
    def collect_events(self, aggregate):
        """Take the aggregate's pending events, to be published after commit"""


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    transaction.atomic() around the block, events via transaction.on_commit()

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = uow.bookings.get(booking_id, lock=True)
            booking.change_status(BookingStatus.ACCEPTED, contact=phone)
            uow.collect_events(booking)
            uow.bookings.update(booking)
        # BookingStatusChanged is delivered here, after COMMIT

    A bus may be injected; the process-wide message_bus is used otherwise.
    """

    def __init__(self, bus=None, using: str = DEFAULT_DB_ALIAS):
        self.using = using
        self._bus = bus
        self._pending: List[DomainEvent] = []
        self._atomic = None
        self._bind_repositories()

    def _bind_repositories(self):
        # Repositories import app models, which are not ready at module import time
        from apps.bookings.infrastructure.repositories import (
            DjangoBookingRepository,
            DjangoRoomRepository,
        )
        from apps.equipment.infrastructure.repositories import (
            DjangoEquipmentLogRepository,
            DjangoEquipmentRepository,
        )
        from apps.payments.infrastructure.repositories import DjangoPaymentRepository
        from apps.users.repositories import DjangoUserRepository

        self.rooms = DjangoRoomRepository()
        self.bookings = DjangoBookingRepository()
        self.users = DjangoUserRepository()
        self.equipment = DjangoEquipmentRepository()
        self.equipment_logs = DjangoEquipmentLogRepository()
        self.payments = DjangoPaymentRepository()

    @property
    def supports_row_locking(self) -> bool:
        return bool(connections[self.using].features.has_select_for_update)

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            super().__exit__(exc_type, exc_val, exc_tb)
        finally:
            atomic, self._atomic = self._atomic, None
            if atomic is not None:
                atomic.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule delivery of the collected events

        The actual COMMIT happens when the atomic block exits; on_commit
        drops the callback if that COMMIT never happens.
        """
        events, self._pending = self._pending, []
        logger.debug(f"Leaving transaction with {len(events)} pending events")
        if events:
            transaction.on_commit(partial(self._deliver, events), using=self.using)

    def rollback(self):
        if self._pending:
            logger.warning(f"Transaction rolled back, dropping {len(self._pending)} events")
        self._pending = []

    def collect_events(self, aggregate):
        events = aggregate.events
        if not events:
            return
        self._pending.extend(events)
        aggregate.clear_events()
        logger.debug(f"Collected {len(events)} events from {type(aggregate).__name__} {aggregate.id}")

    def _deliver(self, events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        bus = self._bus or message_bus
        logger.info(f"Delivering {len(events)} domain events after commit")
        try:
            bus.publish_events(events)
        except Exception as e:
            # Data is committed; a delivery failure must not surface to the caller
            logger.error(f"Error delivering events: {e}", exc_info=True)
