"""WebSocket connection manager that forwards bus events to every client."""

from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import WebSocket

from src.realtime.bus import SessionEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open WebSockets by connection id and broadcasts to all of them."""

    def __init__(self) -> None:
        self.active_connections: dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Accept ``websocket`` and return the connection id assigned to it."""
        await websocket.accept()
        connection_id = uuid4().hex
        self.active_connections[connection_id] = websocket
        logger.info("WebSocket %s connected. Total: %d", connection_id, len(self.active_connections))
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self.active_connections.pop(connection_id, None)
        logger.info("WebSocket %s disconnected. Total: %d", connection_id, len(self.active_connections))

    async def broadcast(self, message: dict) -> None:
        """Send ``message`` to every connection; a dead socket does not stop the rest."""
        for connection_id, websocket in list(self.active_connections.items()):
            try:
                await websocket.send_json(message)
            except Exception as exc:
                logger.warning("Broadcast to %s failed: %s", connection_id, exc)

    async def on_event(self, event: SessionEvent) -> None:
        """Bus subscriber: relay ``event`` to all clients."""
        await self.broadcast(event.to_message())
