"""
Equipment Domain Entities

- EquipmentItem: a physical item with a custody status (aggregate root)
- EquipmentLogEntry: append-only record of one custody transition
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from shared.domain.base import Aggregate, DomainError, Entity, ErrorKind
from apps.equipment.domain.custody import (
    EquipmentAction,
    EquipmentStatus,
    LogAction,
    log_action_for,
    next_status,
)


def generate_scan_code() -> str:
    """Unique code printed on the item's barcode label"""
    return str(uuid4())


def normalize_note(note: str | None) -> str | None:
    if note is None:
        return None
    note = note.strip()
    return note or None


@dataclass(kw_only=True, eq=False)
class EquipmentLogEntry(Entity):
    """One custody transition. Never mutated or deleted once written."""
    equipment_id: UUID
    user_id: UUID
    action: LogAction
    timestamp: datetime
    note: str | None = None


@dataclass(kw_only=True, eq=False)
class EquipmentItem(Aggregate):
    """
    Equipment Aggregate Root

    Key invariants:
    - status changes only through scan()
    - every successful scan produces exactly one log entry
    """

    studio_id: UUID
    owner_id: UUID
    name: str
    brand: str = ''
    type: str = ''
    serial_number: str = ''
    rental_price: Decimal = Decimal('0.00')
    condition: str = ''
    barcode_code: str
    status: EquipmentStatus = EquipmentStatus.AVAILABLE

    def scan(
        self,
        action: EquipmentAction,
        actor_id: UUID,
        at: datetime,
        note: str | None = None,
    ) -> EquipmentLogEntry:
        """
        Apply a custody transition and return the log entry recording it

        Raises DomainError(INVALID_STATUS) when the item cannot be scanned
        in that direction.
        Events: EquipmentScanned
        """
        target = next_status(self.status, action)
        if target is None:
            raise DomainError(
                ErrorKind.INVALID_STATUS,
                f"Equipment {self.id} is {self.status.value}, cannot {action.value}"
            )

        from apps.equipment.domain.events import EquipmentScanned

        old_status = self.status
        self.status = target

        entry = EquipmentLogEntry(
            equipment_id=self.id,
            user_id=actor_id,
            action=log_action_for(action),
            timestamp=at,
            note=normalize_note(note),
        )

        self.add_event(EquipmentScanned(
            aggregate_id=self.id,
            equipment_id=self.id,
            log_entry_id=entry.id,
            action=action,
            old_status=old_status,
            new_status=target,
            actor_id=actor_id
        ))
        return entry

    def __str__(self):
        return f"{self.name} [{self.barcode_code}] ({self.status.value})"
