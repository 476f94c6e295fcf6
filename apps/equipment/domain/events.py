"""
Equipment Domain Events
"""

from dataclasses import dataclass
from uuid import UUID

from shared.domain.base import DomainEvent
from apps.equipment.domain.custody import EquipmentAction, EquipmentStatus


@dataclass(kw_only=True)
class EquipmentScanned(DomainEvent):
    """Event: An item was checked out or in"""
    equipment_id: UUID
    log_entry_id: UUID
    action: EquipmentAction
    old_status: EquipmentStatus
    new_status: EquipmentStatus
    actor_id: UUID
