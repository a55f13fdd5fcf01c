"""WebSocket endpoint for live next-action refreshes."""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from next_tasks.factory import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Keep a client subscribed to vault change events.

    Clients may send "ping" and receive "pong" as a keepalive.
    """
    manager = get_connection_manager()
    await manager.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
            else:
                logger.debug(f"[WebSocket] Ignoring client message: {data}")
    except WebSocketDisconnect:
        logger.info("[WebSocket] Client disconnected normally")
        manager.disconnect(websocket)
    except Exception as e:
        logger.error(f"[WebSocket] Error: {e}", exc_info=True)
        manager.disconnect(websocket)
