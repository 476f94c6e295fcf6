"""
Booking repository contracts

Implemented over the Django ORM in apps.bookings.infrastructure and
in memory in shared.testing.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List
from uuid import UUID

from shared.domain.value_objects import TimeRange
from apps.bookings.domain.entities import Booking, BookingStatus, Room


class AbstractRoomRepository(ABC):

    @abstractmethod
    def get(self, room_id: UUID, lock: bool = False) -> Room | None:
        """
        Load a room

        lock=True takes a row lock held until the transaction ends;
        admissions for the same room serialize on it.
        """


class AbstractBookingRepository(ABC):

    @abstractmethod
    def get(self, booking_id: UUID, lock: bool = False) -> Booking | None:
        pass

    @abstractmethod
    def add(self, booking: Booking) -> None:
        pass

    @abstractmethod
    def update(self, booking: Booking) -> None:
        """Persist status, payment status of an existing booking"""

    @abstractmethod
    def find_overlapping(
        self,
        room_id: UUID,
        time_range: TimeRange,
        statuses: Iterable[BookingStatus],
    ) -> List[Booking]:
        """Bookings of the room in one of statuses whose range overlaps time_range"""
