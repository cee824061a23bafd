"""WebSocket route for live notifications."""
import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from oomf.infra.realtime.ws_manager import ws_manager
from oomf.infra.security.jwt import decode_token

logger = logging.getLogger(__name__)

router = APIRouter()


def get_user_from_token(token: str) -> Optional[str]:
    """Return the user id of a valid access token."""
    payload = decode_token(token)
    if payload is None or payload.get("type") != "access":
        return None
    return payload.get("sub")


@router.websocket("/ws")
async def websocket_notifications(websocket: WebSocket, token: Optional[str] = None):
    """Push ``notification.new`` messages to the connected user.

    Authenticate with ``?token=<access token>``. Clients may send ``ping``
    and get ``pong`` back; everything else is ignored.
    """
    await websocket.accept()
    user_id = get_user_from_token(token) if token else None
    if not user_id:
        logger.warning("[WEBSOCKET] Connection rejected: missing or invalid token")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Invalid token")
        return

    await ws_manager.connect(user_id, websocket, already_accepted=True)
    logger.info("[WEBSOCKET] Connection accepted for user %s", user_id)
    try:
        await websocket.send_json({"type": "connection.established", "user_id": user_id})
        while True:
            text = await websocket.receive_text()
            if text == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("[WEBSOCKET] User %s disconnected", user_id)
    finally:
        await ws_manager.disconnect(user_id, websocket)
