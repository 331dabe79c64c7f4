# foodiebot/services/broadcast.py
import logging
from typing import Any, List

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class AdminBroadcaster:
    """Pushes live events to every connected admin dashboard socket."""

    def __init__(self):
        self.connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections.append(websocket)
        logger.info("Admin dashboard connected (%d open)", len(self.connections))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.connections:
            self.connections.remove(websocket)
            logger.info("Admin dashboard disconnected (%d open)", len(self.connections))

    async def send(self, websocket: WebSocket, event: str, data: Any) -> None:
        await websocket.send_json({"event": event, "data": data})

    async def broadcast(self, event: str, data: Any) -> None:
        for websocket in list(self.connections):
            try:
                await self.send(websocket, event, data)
            except Exception as e:
                # Closed or broken socket; forget it
                logger.warning("Dropping admin socket after failed '%s' push: %s", event, e)
                self.disconnect(websocket)
