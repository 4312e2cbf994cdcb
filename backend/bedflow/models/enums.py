"""
System enumerations.
Kept in one module to avoid circular imports.
"""
from enum import Enum
from typing import Optional, Union


class WardEnum(str, Enum):
    """Clinical department a bed belongs to."""
    ICU = "ICU"
    CARDIOLOGY = "Cardiology"
    GENERAL = "General"
    PEDIATRICS = "Pediatrics"


class BedStatusEnum(str, Enum):
    """Status of a hospital bed."""
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    CLEANING = "Cleaning"
    RESERVED = "Reserved"
    MAINTENANCE = "Maintenance"
    DAMAGED = "Damaged"


class BedTypeEnum(str, Enum):
    """Capability tag of a bed."""
    CRITICAL = "Critical"
    STANDARD = "Standard"


class EventKindEnum(str, Enum):
    """Kinds of change events pushed to subscribers."""
    BED_UPDATED = "bed_updated"
    BED_REMOVED = "bed_removed"
    QUEUE_UPDATED = "queue_updated"


class EntityKindEnum(str, Enum):
    """Entity kinds written to the durability sink."""
    BED = "bed"
    PATIENT = "patient"


class ActorRoleEnum(str, Enum):
    """Role of the staff member acting on the system."""
    DOCTOR = "Doctor"
    NURSE = "Nurse"


class DirectoryStatusEnum(str, Enum):
    """Status shown in the patient directory."""
    WAITING = "Waiting"
    ADMITTED = "Admitted"


class AssignmentModeEnum(str, Enum):
    """How a bed is chosen for a patient."""
    MANUAL = "manual"
    GREEDY = "greedy"


# ============================================
# CONSTANTS RELATED TO ENUMS
# ============================================

WAITING_ROOM = "Waiting Room"

# Wards whose beds are tagged as critical care
CRITICAL_WARDS = [
    WardEnum.ICU,
]


def bed_type_for_ward(ward: WardEnum) -> BedTypeEnum:
    """ICU beds are Critical, everything else Standard."""
    if ward in CRITICAL_WARDS:
        return BedTypeEnum.CRITICAL
    return BedTypeEnum.STANDARD


def _parse_case_insensitive(enum_cls, value: Union[Enum, str, None]):
    if value is None:
        return None
    if isinstance(value, enum_cls):
        return value
    normalized = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == normalized:
            return member
    return None


def parse_bed_status(value: Union[BedStatusEnum, str, None]) -> Optional[BedStatusEnum]:
    """Parses a status case-insensitively. Returns None when unknown."""
    return _parse_case_insensitive(BedStatusEnum, value)


def parse_ward(value: Union[WardEnum, str, None]) -> Optional[WardEnum]:
    """Parses a ward name case-insensitively. Returns None when unknown."""
    return _parse_case_insensitive(WardEnum, value)


def parse_actor_role(value: Union[ActorRoleEnum, str, None]) -> Optional[ActorRoleEnum]:
    """Parses a role name case-insensitively. Returns None when unknown."""
    return _parse_case_insensitive(ActorRoleEnum, value)
