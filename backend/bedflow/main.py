"""
Hospital Bed Coordinator API.
FastAPI with WebSocket push for real-time updates.
"""
from typing import Optional
from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from bedflow.api.router import api_router
from bedflow.config import settings
from bedflow.core.database import create_db_and_tables
from bedflow.core.durability import SqlModelDurabilitySink
from bedflow.core.exceptions import (
    BaseAppException,
    ValidationError,
    NotFoundError,
    ConflictError,
    PermissionDeniedError,
)
from bedflow.core.websocket_manager import manager, WebSocketBroadcaster
from bedflow.services.registry import Registry
from bedflow.utils.init_data import seed_facility
from bedflow.utils.logger import configure_logging

logger = logging.getLogger("bedflow.main")


# ============================================
# ERROR MAPPING
# ============================================

def status_code_for(exc: BaseAppException) -> int:
    """HTTP status for an application exception."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, PermissionDeniedError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ConflictError):
        return 409
    return 500


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "code": exc.code},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": f"HTTP_{exc.status_code}"},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "Malformed request body",
            "code": "VALIDATION_ERROR",
            "detail": str(exc.errors()),
        },
    )


# ============================================
# STARTUP
# ============================================

def build_registry() -> Registry:
    """
    Registry backed by the SQLModel store.

    Creates the tables, replays every stored row, then seeds the facility
    beds when the store was empty.
    """
    create_db_and_tables()
    sink = SqlModelDurabilitySink()
    registry = Registry(sink=sink)
    registry.load(*sink.load_all())

    if settings.SEED_BEDS_ON_STARTUP:
        seed_facility(registry)

    return registry


def create_app(registry: Optional[Registry] = None) -> FastAPI:
    """
    Builds the application.

    Args:
        registry: Registry to serve. When omitted, one backed by the
            configured database is built on startup.
    """
    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(api_router, prefix="/api")

    app.state.registry = registry
    broadcaster = WebSocketBroadcaster(manager)

    @app.on_event("startup")
    def on_startup():
        configure_logging()

        if app.state.registry is None:
            app.state.registry = build_registry()

        app.state.registry.notifier.subscribe(broadcaster)
        logger.info(
            f"{settings.APP_TITLE} started with {len(app.state.registry.list_beds())} beds"
        )

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.registry.notifier.unsubscribe(broadcaster)

    return app


app = create_app()
