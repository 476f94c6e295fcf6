"""
Equipment custody machine

Two states, two scan actions:
    SCAN_OUT: AVAILABLE -> RENTED
    SCAN_IN:  RENTED -> AVAILABLE
Anything else is INVALID_STATUS: the item cannot be scanned in that
direction right now.
"""

from enum import Enum
from typing import Dict, Tuple
from uuid import UUID

from apps.users.roles import UserRole


class EquipmentStatus(Enum):
    AVAILABLE = 'AVAILABLE'
    RENTED = 'RENTED'


class EquipmentAction(Enum):
    """Scan direction requested by the caller"""
    SCAN_OUT = 'SCAN_OUT'
    SCAN_IN = 'SCAN_IN'


class LogAction(Enum):
    """Action recorded in the custody log"""
    CHECK_OUT = 'CHECK_OUT'
    CHECK_IN = 'CHECK_IN'


# action -> (required current status, resulting status, logged action)
CUSTODY_TRANSITIONS: Dict[EquipmentAction, Tuple[EquipmentStatus, EquipmentStatus, LogAction]] = {
    EquipmentAction.SCAN_OUT: (EquipmentStatus.AVAILABLE, EquipmentStatus.RENTED, LogAction.CHECK_OUT),
    EquipmentAction.SCAN_IN: (EquipmentStatus.RENTED, EquipmentStatus.AVAILABLE, LogAction.CHECK_IN),
}


def next_status(current: EquipmentStatus, action: EquipmentAction) -> EquipmentStatus | None:
    """Status after action, or None when action is not possible from current"""
    required, result, _ = CUSTODY_TRANSITIONS[action]
    if current != required:
        return None
    return result


def log_action_for(action: EquipmentAction) -> LogAction:
    return CUSTODY_TRANSITIONS[action][2]


def can_operate(role: UserRole | None, actor_id: UUID, studio_owner_id: UUID) -> bool:
    """Owner of the item's studio, or an administrator"""
    if role == UserRole.ADMIN:
        return True
    return role == UserRole.STUDIO_OWNER and actor_id == studio_owner_id
