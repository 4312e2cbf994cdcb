"""
System endpoints: health check and troubleshooting snapshot.
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from datetime import datetime, timezone

from bedflow.api.deps import get_actor_role, get_directory_service
from bedflow.config import settings
from bedflow.core.websocket_manager import manager
from bedflow.models.enums import ActorRoleEnum
from bedflow.schemas.patient import SnapshotResponse
from bedflow.services.directory_service import DirectoryService

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Checks that the application is running",
    response_model=None,
)
async def health_check(request: Request) -> JSONResponse:
    """
    Basic health check, no role header needed.

    Useful for container health checks and load balancers.
    """
    registry = request.app.state.registry
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "beds": len(registry.list_beds()),
            "queued_patients": len(registry.list_patients()),
            "websocket_connections": manager.connection_count,
        },
    )


@router.get("/system/audit", response_model=SnapshotResponse)
async def system_audit(
    directory: DirectoryService = Depends(get_directory_service),
    actor_role: ActorRoleEnum = Depends(get_actor_role),
):
    """Point-in-time dump of queued and admitted patients."""
    return directory.system_snapshot()
