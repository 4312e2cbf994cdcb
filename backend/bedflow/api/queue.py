"""
ER queue endpoints.
"""
from fastapi import APIRouter, Depends
from typing import List

from bedflow.api.deps import get_actor_role, get_registry
from bedflow.core.exceptions import PatientNotFoundError
from bedflow.models.enums import ActorRoleEnum
from bedflow.schemas.patient import PatientCreate, PatientResponse
from bedflow.schemas.responses import MessageResponse
from bedflow.services.registry import Registry

router = APIRouter()


@router.get("", response_model=List[PatientResponse])
async def get_queue(
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Waiting patients in priority order."""
    return [PatientResponse.model_validate(p) for p in registry.sorted_queue()]


@router.post("", response_model=PatientResponse, status_code=201)
async def add_to_queue(
    request: PatientCreate,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Adds a patient to the ER queue."""
    patient = registry.add_patient(request.model_dump(), actor_role)
    return PatientResponse.model_validate(patient)


@router.delete("/{patient_id}", response_model=MessageResponse)
async def remove_from_queue(
    patient_id: str,
    registry: Registry = Depends(get_registry),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Removes a patient from the ER queue."""
    if not registry.remove_patient(patient_id, actor_role):
        raise PatientNotFoundError(patient_id)
    return MessageResponse(success=True, message="Patient removed from ER queue")
