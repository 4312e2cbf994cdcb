"""
Pydantic schemas for validation and serialization.
"""
from bedflow.schemas.patient import (
    PatientCreate,
    PatientResponse,
    DirectoryEntryResponse,
    SnapshotResponse,
)
from bedflow.schemas.bed import (
    BedResponse,
    BedStatusUpdateRequest,
    BedCreateRequest,
    AssignRequest,
    AssignResponse,
    TransferRequest,
    TransferResponse,
    BedStatsResponse,
)
from bedflow.schemas.responses import MessageResponse, ErrorResponse

__all__ = [
    "PatientCreate",
    "PatientResponse",
    "DirectoryEntryResponse",
    "SnapshotResponse",
    "BedResponse",
    "BedStatusUpdateRequest",
    "BedCreateRequest",
    "AssignRequest",
    "AssignResponse",
    "TransferRequest",
    "TransferResponse",
    "BedStatsResponse",
    "MessageResponse",
    "ErrorResponse",
]
