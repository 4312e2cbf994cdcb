"""
Patient schemas.
"""
from pydantic import BaseModel
from typing import Optional, List, Union
from datetime import datetime

from bedflow.models.enums import DirectoryStatusEnum


class PatientCreate(BaseModel):
    """
    Request to add a patient to the ER queue.

    Fields are loosely typed on purpose so that missing or out-of-range
    values reach the registry and come back as a 400 with the usual error
    body.
    """
    name: Optional[str] = None
    triage_level: Optional[Union[int, str]] = None
    condition: Optional[str] = None


class PatientResponse(BaseModel):
    """Patient in the ER queue or in a bed."""
    id: str
    name: str
    triage_level: int
    condition: str
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DirectoryEntryResponse(BaseModel):
    """One line of the patient directory."""
    id: str
    name: str
    triage_level: int
    condition: str
    joined_at: Optional[datetime] = None
    status: DirectoryStatusEnum
    location: str
    ward: Optional[str] = None
    bed_id: Optional[str] = None
    priority_score: Optional[float] = None


class SnapshotQueueEntry(BaseModel):
    id: str
    name: str
    type: str


class SnapshotBedEntry(BaseModel):
    id: str
    name: str
    bed: str
    type: str


class SnapshotResponse(BaseModel):
    """Point-in-time dump of active patients."""
    timestamp: datetime
    queue: List[SnapshotQueueEntry]
    beds: List[SnapshotBedEntry]
    total_active: int
