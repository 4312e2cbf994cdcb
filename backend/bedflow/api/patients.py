"""
Patient endpoints: search, directory and purge.
"""
from fastapi import APIRouter, Depends
from typing import List, Optional

from bedflow.api.deps import (
    get_actor_role,
    get_registry,
    get_admission_service,
    get_directory_service,
)
from bedflow.models.enums import ActorRoleEnum
from bedflow.schemas.patient import PatientResponse, DirectoryEntryResponse
from bedflow.schemas.responses import MessageResponse
from bedflow.services.admission_service import AdmissionService
from bedflow.services.directory_service import DirectoryService
from bedflow.services.registry import Registry

router = APIRouter()


@router.get("", response_model=List[PatientResponse])
async def search_patients(
    query: Optional[str] = None,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Searches queued patients by id or name."""
    return [PatientResponse.model_validate(p) for p in registry.find_patients(query)]


@router.get("/directory", response_model=List[DirectoryEntryResponse])
async def patient_directory(
    directory: DirectoryService = Depends(get_directory_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Waiting and admitted patients in one list."""
    return [entry.to_dict() for entry in directory.build_directory()]


@router.delete("/{patient_id}", response_model=MessageResponse)
async def purge_patient(
    patient_id: str,
    admission: AdmissionService = Depends(get_admission_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """
    Removes a patient from the system, wherever they are.

    Queued patients leave the queue; admitted patients are discharged.
    """
    result = admission.purge(patient_id, actor_role)
    return MessageResponse(
        success=True,
        message=result.message,
        data={"patient_id": result.patient_id, "bed_id": result.bed_id},
    )
