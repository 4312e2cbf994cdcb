"""
Shared endpoint dependencies.
"""
from typing import Optional
from fastapi import Header, HTTPException, Request, status

from bedflow.models.enums import ActorRoleEnum, parse_actor_role
from bedflow.services.registry import Registry
from bedflow.services.assignment_service import AssignmentService
from bedflow.services.admission_service import AdmissionService
from bedflow.services.directory_service import DirectoryService


def get_registry(request: Request) -> Registry:
    """Registry kept on the application state."""
    return request.app.state.registry


def get_assignment_service(request: Request) -> AssignmentService:
    return AssignmentService(get_registry(request))


def get_admission_service(request: Request) -> AdmissionService:
    return AdmissionService(get_registry(request))


def get_directory_service(request: Request) -> DirectoryService:
    return DirectoryService(get_registry(request))


def get_actor_role(
    x_actor_role: Optional[str] = Header(default=None, alias="X-Actor-Role"),
) -> ActorRoleEnum:
    """
    Acting role, already authenticated by the gateway.

    Raises:
        HTTPException 401: header missing
        HTTPException 403: unknown role
    """
    if not x_actor_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Actor-Role header is required",
        )

    role = parse_actor_role(x_actor_role)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role '{x_actor_role}'",
        )
    return role
