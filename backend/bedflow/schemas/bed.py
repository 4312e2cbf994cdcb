"""
Bed schemas.
"""
from pydantic import BaseModel
from typing import Optional

from bedflow.models.enums import WardEnum, BedStatusEnum, BedTypeEnum
from bedflow.schemas.patient import PatientResponse


class BedResponse(BaseModel):
    """Response schema for a bed."""
    id: str
    ward: WardEnum
    status: BedStatusEnum
    distance_from_station: int
    type: BedTypeEnum

    # Present only while Occupied
    occupant: Optional[PatientResponse] = None

    class Config:
        from_attributes = True


class BedStatusUpdateRequest(BaseModel):
    """Request to set a bed status by hand."""
    status: Optional[str] = None


class BedCreateRequest(BaseModel):
    """Request to add a bed to a ward."""
    ward: Optional[str] = None


class AssignRequest(BaseModel):
    """
    Request to admit a queued patient.

    `manual` needs `bed_id`, `greedy` needs `wanted_ward`. When `mode` is
    omitted it is inferred: a bed id means manual, otherwise greedy.
    """
    mode: Optional[str] = None
    patient_id: Optional[str] = None
    bed_id: Optional[str] = None
    wanted_ward: Optional[str] = None

    def resolved_mode(self) -> str:
        if self.mode:
            return self.mode
        return "manual" if self.bed_id else "greedy"


class AssignResponse(BaseModel):
    success: bool
    message: str
    bed: BedResponse


class TransferRequest(BaseModel):
    """Request to move a patient between beds."""
    source_bed_id: Optional[str] = None
    target_bed_id: Optional[str] = None


class TransferResponse(BaseModel):
    success: bool
    message: str
    source_bed: BedResponse
    target_bed: BedResponse


class BedStatsResponse(BaseModel):
    """Bed counts per status for the dashboard."""
    total: int
    available: int
    occupied: int
    cleaning: int
    reserved: int
    maintenance: int
    damaged: int
    waiting_patients: int
    occupancy_percentage: float
