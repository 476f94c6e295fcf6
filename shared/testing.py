"""
In-memory persistence for engine tests

InMemoryStore plays the backing store; each InMemoryUnitOfWork stages its
writes and applies them to the store on commit, so a rejected operation
leaves the store untouched exactly as a rolled back transaction would.
The store has no row locks: handlers fall back to the in-process keyed
locks, which is what the concurrency tests exercise.
"""

from copy import deepcopy
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Set
from uuid import UUID, uuid4
import threading

from django.db import DatabaseError  # type: ignore

from shared.application.message_bus import MessageBus
from shared.application.uow import AbstractUnitOfWork
from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money, TimeRange
from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus, Room
from apps.bookings.domain.repositories import AbstractBookingRepository, AbstractRoomRepository
from apps.equipment.domain.custody import EquipmentStatus
from apps.equipment.domain.entities import EquipmentItem, EquipmentLogEntry, generate_scan_code
from apps.equipment.domain.repositories import (
    AbstractEquipmentLogRepository,
    AbstractEquipmentRepository,
)
from apps.payments.domain.entities import PaymentRecord
from apps.payments.domain.repositories import AbstractPaymentRepository
from apps.users.repositories import AbstractUserRepository


def _snapshot(entity):
    copied = deepcopy(entity)
    if hasattr(copied, 'clear_events'):
        copied.clear_events()
    return copied


class InMemoryStore:
    """Committed state shared by every unit of work created from it"""

    def __init__(self):
        self.lock = threading.RLock()
        self.rooms: Dict[UUID, Room] = {}
        self.bookings: Dict[UUID, Booking] = {}
        self.contacts: Dict[UUID, str | None] = {}
        self.equipment: Dict[UUID, EquipmentItem] = {}
        self.equipment_logs: List[EquipmentLogEntry] = []
        self.payments: Dict[UUID, PaymentRecord] = {}
        self.published: List[DomainEvent] = []
        self.commits = 0
        # 1-based commit attempts that raise DatabaseError instead of applying
        self.failing_commits: Set[int] = set()
        self.commit_attempts = 0

    def uow_factory(self, bus: MessageBus | None = None):
        return lambda: InMemoryUnitOfWork(self, bus=bus)

    # ----- seeding helpers -----

    def add_user(self, phone: str | None = None) -> UUID:
        user_id = uuid4()
        self.contacts[user_id] = phone
        return user_id

    def add_room(self, owner_id: UUID, hourly_price: int = 100000, **kwargs) -> Room:
        room = Room(
            studio_id=kwargs.pop('studio_id', uuid4()),
            owner_id=owner_id,
            hourly_price=hourly_price,
            **kwargs,
        )
        self.rooms[room.id] = room
        return room

    def add_booking(
        self,
        room: Room,
        photographer_id: UUID,
        start: datetime,
        end: datetime,
        status: BookingStatus = BookingStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        total: Decimal = Decimal('0'),
    ) -> Booking:
        booking = Booking(
            room_id=room.id,
            photographer_id=photographer_id,
            time_range=TimeRange(start, end),
            total_price=Money(total),
            status=status,
            payment_status=payment_status,
            created_at=start,
        )
        self.bookings[booking.id] = booking
        return booking

    def add_equipment(
        self,
        owner_id: UUID,
        status: EquipmentStatus = EquipmentStatus.AVAILABLE,
        **kwargs,
    ) -> EquipmentItem:
        item = EquipmentItem(
            studio_id=kwargs.pop('studio_id', uuid4()),
            owner_id=owner_id,
            name=kwargs.pop('name', 'Softbox'),
            barcode_code=kwargs.pop('barcode_code', generate_scan_code()),
            status=status,
            **kwargs,
        )
        self.equipment[item.id] = item
        return item

    def add_payment(self, booking: Booking, external_ref: str, **kwargs) -> PaymentRecord:
        record = PaymentRecord(
            booking_id=booking.id,
            amount=booking.total_price,
            external_ref=external_ref,
            created_at=kwargs.pop('created_at', booking.created_at),
            **kwargs,
        )
        self.payments[record.id] = record
        return record

    # ----- queries for assertions -----

    def logs_for(self, equipment_id: UUID) -> List[EquipmentLogEntry]:
        return [entry for entry in self.equipment_logs if entry.equipment_id == equipment_id]

    def blocking_bookings(self, room_id: UUID) -> List[Booking]:
        return [
            booking for booking in self.bookings.values()
            if booking.room_id == room_id and booking.blocks_calendar()
        ]


class _StagedRepository:

    collection = ''

    def __init__(self, uow: 'InMemoryUnitOfWork'):
        self.uow = uow
        self.store = uow.store

    @property
    def staged(self) -> dict:
        return self.uow.staged.setdefault(self.collection, {})

    def _committed(self) -> dict:
        return getattr(self.store, self.collection)

    def _get(self, key):
        if key in self.staged:
            return _snapshot(self.staged[key])
        with self.store.lock:
            found = self._committed().get(key)
        return _snapshot(found) if found is not None else None

    def _all(self) -> list:
        with self.store.lock:
            merged = dict(self._committed())
        merged.update(self.staged)
        return [_snapshot(value) for value in merged.values()]

    def _put(self, key, value):
        self.staged[key] = _snapshot(value)


class InMemoryRoomRepository(_StagedRepository, AbstractRoomRepository):
    collection = 'rooms'

    def get(self, room_id, lock=False):
        return self._get(room_id)


class InMemoryBookingRepository(_StagedRepository, AbstractBookingRepository):
    collection = 'bookings'

    def get(self, booking_id, lock=False):
        return self._get(booking_id)

    def add(self, booking):
        self._put(booking.id, booking)

    def update(self, booking):
        self._put(booking.id, booking)

    def find_overlapping(self, room_id, time_range, statuses):
        statuses = set(statuses)
        return [
            booking for booking in self._all()
            if booking.room_id == room_id
            and booking.status in statuses
            and booking.time_range.overlaps_with(time_range)
        ]


class InMemoryUserRepository(AbstractUserRepository):

    def __init__(self, uow: 'InMemoryUnitOfWork'):
        self.store = uow.store

    def get_contact(self, user_id):
        return self.store.contacts.get(user_id)


class InMemoryEquipmentRepository(_StagedRepository, AbstractEquipmentRepository):
    collection = 'equipment'

    def get(self, equipment_id, lock=False):
        return self._get(equipment_id)

    def get_by_scan_code(self, scan_code, lock=False):
        for item in self._all():
            if item.barcode_code == scan_code:
                return item
        return None

    def add(self, item):
        self._put(item.id, item)

    def update(self, item):
        self._put(item.id, item)


class InMemoryEquipmentLogRepository(AbstractEquipmentLogRepository):

    def __init__(self, uow: 'InMemoryUnitOfWork'):
        self.uow = uow
        self.store = uow.store

    def append(self, entry):
        self.uow.staged_logs.append(_snapshot(entry))

    def list_for_equipment(self, equipment_id):
        with self.store.lock:
            committed = list(self.store.equipment_logs)
        return [
            _snapshot(entry) for entry in committed + self.uow.staged_logs
            if entry.equipment_id == equipment_id
        ]


class InMemoryPaymentRepository(_StagedRepository, AbstractPaymentRepository):
    collection = 'payments'

    def get(self, payment_id, lock=False):
        return self._get(payment_id)

    def get_by_external_ref(self, external_ref, lock=False):
        for record in self._all():
            if record.external_ref == external_ref:
                return record
        return None

    def find_active_for_booking(self, booking_id):
        active = (PaymentStatus.PENDING, PaymentStatus.PAID)
        for record in self._all():
            if record.booking_id == booking_id and record.status in active:
                return record
        return None

    def add(self, record):
        self._put(record.id, record)

    def update(self, record):
        self._put(record.id, record)


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Staged writes applied to the store on commit

    Events are handed to the bus right after the store is updated, the
    in-memory counterpart of transaction.on_commit.
    """

    def __init__(self, store: InMemoryStore, bus: MessageBus | None = None):
        self.store = store
        self.bus = bus
        self.staged: Dict[str, dict] = {}
        self.staged_logs: List[EquipmentLogEntry] = []
        self._events: List[DomainEvent] = []

        self.rooms = InMemoryRoomRepository(self)
        self.bookings = InMemoryBookingRepository(self)
        self.users = InMemoryUserRepository(self)
        self.equipment = InMemoryEquipmentRepository(self)
        self.equipment_logs = InMemoryEquipmentLogRepository(self)
        self.payments = InMemoryPaymentRepository(self)

    def commit(self):
        with self.store.lock:
            self.store.commit_attempts += 1
            if self.store.commit_attempts in self.store.failing_commits:
                self._reset()
                raise DatabaseError(f"commit {self.store.commit_attempts} failed")
            for collection, rows in self.staged.items():
                getattr(self.store, collection).update(rows)
            self.store.equipment_logs.extend(self.staged_logs)
            self.store.published.extend(self._events)
            self.store.commits += 1

        events = self._events.copy()
        self._reset()

        if events and self.bus is not None:
            self.bus.publish_events(events)

    def rollback(self):
        self._reset()

    def collect_events(self, aggregate):
        self._events.extend(aggregate.events)
        aggregate.clear_events()

    def _reset(self):
        self.staged = {}
        self.staged_logs = []
        self._events = []
