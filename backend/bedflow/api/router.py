"""
Main router grouping every sub-router.
"""
from fastapi import APIRouter

from bedflow.api import beds
from bedflow.api import queue
from bedflow.api import patients
from bedflow.api import system
from bedflow.api import websocket

api_router = APIRouter()

# ============================================
# INCLUDE ROUTERS
# ============================================

# Health check and audit (health needs no role header)
api_router.include_router(
    system.router,
    tags=["System"]
)

api_router.include_router(
    beds.router,
    prefix="/beds",
    tags=["Beds"]
)

api_router.include_router(
    queue.router,
    prefix="/queue",
    tags=["ER Queue"]
)

api_router.include_router(
    patients.router,
    prefix="/patients",
    tags=["Patients"]
)

api_router.include_router(
    websocket.router,
    tags=["WebSocket"]
)
