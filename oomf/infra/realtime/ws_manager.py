"""WebSocket connection manager for live notifications."""
import logging
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketConnectionManager:
    """Tracks open notification sockets per user (one user may have several devices)."""

    def __init__(self):
        self.connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket, already_accepted: bool = False) -> None:
        if not already_accepted:
            await websocket.accept()
        self.connections.setdefault(user_id, set()).add(websocket)
        logger.debug("[WEBSOCKET] User %s connected (%s open)", user_id, len(self.connections[user_id]))

    async def disconnect(self, user_id: str, websocket: WebSocket) -> None:
        sockets = self.connections.get(user_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.connections[user_id]

    def is_connected(self, user_id: str) -> bool:
        return bool(self.connections.get(user_id))

    async def send_to_user(self, user_id: str, message: dict) -> None:
        """Send message to every open socket of the user; dead sockets are dropped."""
        sockets = self.connections.get(user_id)
        if not sockets:
            logger.debug("[WEBSOCKET] User %s has no open sockets, skipping %s", user_id, message.get("type", "unknown"))
            return

        disconnected = []
        for websocket in sockets.copy():
            try:
                await websocket.send_json(message)
            except (RuntimeError, ConnectionError) as e:
                logger.warning("[WEBSOCKET] Connection closed for user %s: %s", user_id, e)
                disconnected.append(websocket)
            except Exception as e:
                logger.error("[WEBSOCKET] Failed to send to user %s: %s", user_id, e)
                disconnected.append(websocket)

        for websocket in disconnected:
            await self.disconnect(user_id, websocket)


# Global instance
ws_manager = WebSocketConnectionManager()
