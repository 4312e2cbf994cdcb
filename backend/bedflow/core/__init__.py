"""
Core module: infrastructure shared by the services.
"""
from bedflow.core.database import create_db_and_tables, get_session_direct, engine
from bedflow.core.websocket_manager import manager, ConnectionManager, WebSocketBroadcaster
from bedflow.core.notifier import ChangeNotifier, ChangeEvent, RecordingSubscriber
from bedflow.core.exceptions import (
    BaseAppException,
    ValidationError,
    NotFoundError,
    BedNotFoundError,
    PatientNotFoundError,
    ConflictError,
    BedNotAvailableError,
    InvalidStateError,
    PermissionDeniedError,
    DurabilityError,
)

__all__ = [
    "create_db_and_tables",
    "get_session_direct",
    "engine",
    "manager",
    "ConnectionManager",
    "WebSocketBroadcaster",
    "ChangeNotifier",
    "ChangeEvent",
    "RecordingSubscriber",
    "BaseAppException",
    "ValidationError",
    "NotFoundError",
    "BedNotFoundError",
    "PatientNotFoundError",
    "ConflictError",
    "BedNotAvailableError",
    "InvalidStateError",
    "PermissionDeniedError",
    "DurabilityError",
]
