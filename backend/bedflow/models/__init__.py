"""
Domain records and persistence rows.
"""
from bedflow.models.enums import (
    WardEnum,
    BedStatusEnum,
    BedTypeEnum,
    EventKindEnum,
    EntityKindEnum,
    ActorRoleEnum,
    DirectoryStatusEnum,
    AssignmentModeEnum,
)
from bedflow.models.patient import Patient
from bedflow.models.bed import Bed
from bedflow.models.records import BedRecord, PatientRecord

__all__ = [
    "WardEnum",
    "BedStatusEnum",
    "BedTypeEnum",
    "EventKindEnum",
    "EntityKindEnum",
    "ActorRoleEnum",
    "DirectoryStatusEnum",
    "AssignmentModeEnum",
    "Patient",
    "Bed",
    "BedRecord",
    "PatientRecord",
]
