"""
WebSocket endpoint.
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
import logging

from bedflow.core.websocket_manager import manager

router = APIRouter()
logger = logging.getLogger("bedflow.websocket")


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    Push channel for change events.

    Clients receive `bed_updated`, `bed_removed` and `queue_updated`
    messages. They may send {"action": "ping"} to keep the connection alive.
    Nothing is replayed on connect; clients fetch full state over HTTP.
    """
    await manager.connect(websocket)

    try:
        while True:
            if websocket.client_state != WebSocketState.CONNECTED:
                break

            try:
                data = await websocket.receive_json()
            except WebSocketDisconnect:
                break
            except ValueError as e:
                # Not JSON
                logger.warning(f"Ignoring malformed WebSocket message: {e}")
                continue

            if isinstance(data, dict) and data.get("action") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        pass
    except RuntimeError as e:
        # Starlette raises this when receiving after the client went away
        logger.warning(f"WebSocket runtime error: {e}")
    finally:
        manager.disconnect(websocket)
