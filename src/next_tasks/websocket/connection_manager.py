"""WebSocket connection management."""

import logging

from fastapi import WebSocket

from next_tasks.api.models import VaultChangedEvent

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks WebSocket clients and pushes vault change events to them."""

    def __init__(self) -> None:
        """Initialize connection manager with empty connection list."""
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)
        logger.info(f"[ConnectionManager] Client connected (total: {len(self.active_connections)})")

    def disconnect(self, websocket: WebSocket) -> None:
        """Remove a WebSocket connection from active list."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
            logger.info(
                f"[ConnectionManager] Client disconnected (total: {len(self.active_connections)})"
            )

    async def broadcast(self, event: VaultChangedEvent) -> None:
        """Send a change event to every client, dropping ones that fail.

        Args:
            event: Change to announce so clients refresh their next actions
        """
        if not self.active_connections:
            logger.debug("[ConnectionManager] No active connections to broadcast to")
            return

        message_json = event.model_dump_json()
        logger.debug(
            f"[ConnectionManager] Broadcasting to {len(self.active_connections)} clients: "
            f"{message_json}"
        )

        dead_connections = []
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message_json)
            except Exception as e:
                logger.warning(f"[ConnectionManager] Failed to send to client: {e}")
                dead_connections.append(connection)

        for connection in dead_connections:
            self.disconnect(connection)
