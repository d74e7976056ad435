"""WebSocket endpoint: presence registration and the live event stream.

Frames are JSON objects ``{"event": <name>, "data": <payload>}`` in both
directions. Inbound events:

* ``register`` with ``{"key": <member key>}``
* ``start_evaluation`` with no payload

Closing the socket unregisters the connection.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.api.services import SessionServices
from src.evaluator.exceptions import SessionError
from src.realtime.presence import PresenceTracker

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_message(presence: PresenceTracker, connection_id: str, message: Any) -> None:
    """Dispatch one inbound frame to the presence tracker."""
    if not isinstance(message, dict):
        logger.warning("Ignoring malformed frame from %s", connection_id)
        return

    event = message.get("event")
    data = message.get("data")
    if not isinstance(data, dict):
        data = {}

    if event == "register":
        await presence.register(connection_id, str(data.get("key") or ""))
    elif event == "start_evaluation":
        try:
            await presence.start_evaluation(connection_id)
        except SessionError as exc:
            logger.error("start_evaluation from %s failed: %s", connection_id, exc)
    else:
        logger.debug("Ignoring unknown event %r from %s", event, connection_id)


@router.websocket("/ws")
async def session_socket(websocket: WebSocket) -> None:
    services: SessionServices = websocket.app.state.services
    connection_id = await services.connections.connect(websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Ignoring non-JSON frame from %s", connection_id)
                continue
            await handle_message(services.presence, connection_id, message)
    except WebSocketDisconnect as exc:
        logger.debug("WebSocket %s closed (code %s)", connection_id, exc.code)
    finally:
        services.connections.disconnect(connection_id)
        await services.presence.unregister(connection_id)
