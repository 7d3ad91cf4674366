"""WebSocket connection manager for device commands and user notices."""

import json
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks the phone/UI sockets connected to this service."""

    def __init__(self) -> None:
        self._connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._connections.add(websocket)
        logger.info("WS connected (total=%s)", self.total_connections)

    def disconnect(self, websocket: WebSocket) -> None:
        self._connections.discard(websocket)
        logger.info("WS disconnected (total=%s)", self.total_connections)

    async def broadcast(self, event: str, data: Any) -> int:
        """Send event to every connection. Returns how many sockets took it."""
        payload = json.dumps({"event": event, "data": data}, default=str)
        delivered = 0
        dead: list[WebSocket] = []
        for ws in list(self._connections):
            try:
                await ws.send_text(payload)
                delivered += 1
            except Exception:
                dead.append(ws)
        for ws in dead:
            self._connections.discard(ws)
        return delivered

    async def publish(self, event: str, data: Any) -> None:
        """Push a user-visible notice; nobody listening is not an error."""
        delivered = await self.broadcast(event, data)
        if not delivered:
            logger.debug("Notice %s had no listeners", event)

    @property
    def total_connections(self) -> int:
        return len(self._connections)


# Singleton instance used across the app
ws_manager = ConnectionManager()
