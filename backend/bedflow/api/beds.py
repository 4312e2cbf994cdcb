"""
Bed endpoints.
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import List, Optional

from bedflow.api.deps import (
    get_actor_role,
    get_registry,
    get_assignment_service,
    get_admission_service,
)
from bedflow.core.exceptions import BedNotFoundError
from bedflow.models.enums import ActorRoleEnum, BedStatusEnum
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
from bedflow.schemas.responses import MessageResponse
from bedflow.services.admission_service import AdmissionService
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.registry import Registry

router = APIRouter()


@router.get("", response_model=List[BedResponse])
async def list_beds(
    status: Optional[str] = None,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Lists every bed, optionally filtered by status."""
    return [BedResponse.model_validate(bed) for bed in registry.list_beds(status)]


@router.get("/stats", response_model=BedStatsResponse)
async def bed_stats(
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Bed counts per status plus the ER queue length."""
    counts = registry.count_by_status()
    total = counts["total"]
    occupied = counts[BedStatusEnum.OCCUPIED.value]

    return BedStatsResponse(
        total=total,
        available=counts[BedStatusEnum.AVAILABLE.value],
        occupied=occupied,
        cleaning=counts[BedStatusEnum.CLEANING.value],
        reserved=counts[BedStatusEnum.RESERVED.value],
        maintenance=counts[BedStatusEnum.MAINTENANCE.value],
        damaged=counts[BedStatusEnum.DAMAGED.value],
        waiting_patients=len(registry.list_patients()),
        occupancy_percentage=round(occupied / total * 100, 1) if total else 0.0,
    )


@router.post("", response_model=BedResponse, status_code=201)
async def add_bed(
    request: BedCreateRequest,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Adds an Available bed to a ward."""
    bed = registry.add_bed(request.ward, actor_role)
    return BedResponse.model_validate(bed)


@router.post("/assign", response_model=AssignResponse)
async def assign_bed(
    request: AssignRequest,
    admission: AdmissionService = Depends(get_admission_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """
    Admits a queued patient, by hand or to the closest Available bed.

    The patient leaves the ER queue once a bed is assigned.
    """
    bed = admission.assign(
        request.resolved_mode(),
        request.patient_id,
        bed_id=request.bed_id,
        wanted_ward=request.wanted_ward,
        actor_role=actor_role,
    )

    if bed is None:
        return JSONResponse(
            status_code=404,
            content={
                "error": "No available beds found",
                "code": "NO_BED_AVAILABLE",
                "detail": "Consider transferring a patient or waiting.",
            },
        )

    return AssignResponse(
        success=True,
        message="Bed assigned successfully",
        bed=BedResponse.model_validate(bed),
    )


@router.post("/transfer", response_model=TransferResponse)
async def transfer_patient(
    request: TransferRequest,
    assignment: AssignmentService = Depends(get_assignment_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Moves a patient to another bed; the source goes to Cleaning."""
    result = assignment.transfer(request.source_bed_id, request.target_bed_id, actor_role)

    return TransferResponse(
        success=True,
        message="Transfer successful",
        source_bed=BedResponse.model_validate(result.source_bed),
        target_bed=BedResponse.model_validate(result.target_bed),
    )


@router.get("/{bed_id}", response_model=BedResponse)
async def get_bed(
    bed_id: str,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Returns a single bed."""
    bed = registry.get_bed(bed_id)
    if bed is None:
        raise BedNotFoundError(bed_id)
    return BedResponse.model_validate(bed)


@router.patch("/{bed_id}/status", response_model=BedResponse)
async def update_bed_status(
    bed_id: str,
    request: BedStatusUpdateRequest,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Sets the status of a bed by hand."""
    bed = registry.upsert_bed_status(bed_id, request.status, actor_role)
    return BedResponse.model_validate(bed)


@router.patch("/{bed_id}/discharge", response_model=MessageResponse)
async def discharge_patient(
    bed_id: str,
    assignment: AssignmentService = Depends(get_assignment_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """
    Discharges the occupant of a bed.

    An unknown bed is not an error: nothing happens and `data` is null.
    """
    bed = assignment.discharge(bed_id, actor_role)
    if bed is None:
        return MessageResponse(success=True, message=f"Bed {bed_id} not found, nothing to discharge")

    return MessageResponse(
        success=True,
        message="Patient discharged",
        data=BedResponse.model_validate(bed).model_dump(mode="json"),
    )


@router.delete("/{bed_id}", response_model=MessageResponse)
async def remove_bed(
    bed_id: str,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Deletes an empty bed."""
    registry.remove_bed(bed_id, actor_role)
    return MessageResponse(success=True, message=f"Bed {bed_id} removed")
