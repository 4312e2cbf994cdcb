"""
WebSocket connection manager.
Broadcasts change events to connected clients.
"""
from typing import List, Set
from fastapi import WebSocket
import asyncio
import logging

from bedflow.core.notifier import ChangeEvent

logger = logging.getLogger("bedflow.websocket")


class ConnectionManager:
    """
    WebSocket connection manager.

    Features:
    - Keeps the list of active connections
    - Drops dead connections after a failed send
    - No replay: clients re-fetch state after reconnecting
    """

    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """
        Accepts a WebSocket client.

        Args:
            websocket: WebSocket connection
        """
        await websocket.accept()
        self.active_connections.append(websocket)

        logger.info(
            f"WebSocket connected. Total connections: {len(self.active_connections)}"
        )

    def disconnect(self, websocket: WebSocket) -> None:
        """
        Forgets a WebSocket client.

        Args:
            websocket: Connection to drop
        """
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

        logger.info(
            f"WebSocket disconnected. Total connections: {len(self.active_connections)}"
        )

    async def broadcast(self, message: dict) -> None:
        """
        Sends a message to every connected client.

        Args:
            message: JSON-serialisable message
        """
        disconnected: List[WebSocket] = []

        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Error sending message: {e}")
                disconnected.append(connection)

        # Drop dead connections
        for conn in disconnected:
            self.disconnect(conn)

    @property
    def connection_count(self) -> int:
        """Number of active connections."""
        return len(self.active_connections)


class WebSocketBroadcaster:
    """
    Change-notifier subscriber that pushes events through a ConnectionManager.

    Registry operations are synchronous, so the send is scheduled on the
    running event loop and the operation returns right away. With no running
    loop the event is dropped.
    """

    def __init__(self, connection_manager: ConnectionManager):
        self.connection_manager = connection_manager
        # Strong references until each send finishes, the loop only keeps weak ones
        self._tasks: Set[asyncio.Task] = set()

    def __call__(self, event: ChangeEvent) -> None:
        if not self.connection_manager.active_connections:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop, dropping {event.kind.value} broadcast")
            return

        task = loop.create_task(self.connection_manager.broadcast(event.to_message()))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


# Global manager instance
manager = ConnectionManager()
