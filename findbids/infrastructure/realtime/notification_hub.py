import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from ...application.ports.notification_backend import NotificationBackend

logger = logging.getLogger(__name__)


class NotificationHub:
    """
    Owns the user -> sockets registry for this process and the backend that
    carries published payloads to every process holding a socket.

    Routes get the hub through a dependency; nothing here is module-global.
    """

    def __init__(self, backend: NotificationBackend):
        self.backend = backend
        self.connections: Dict[int, List[WebSocket]] = {}
        self._started = False

    async def start(self) -> None:
        if self._started:
            return
        await self.backend.start(self.deliver_local)
        self._started = True
        logger.info(f"Notification hub started with {type(self.backend).__name__}")

    async def stop(self) -> None:
        if not self._started:
            return
        await self.backend.stop()
        self._started = False
        logger.info("Notification hub stopped")

    def register(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self.connections.setdefault(user_id, [])
        if websocket not in sockets:
            sockets.append(websocket)
        logger.info(f"WebSocket registered for user {user_id}. Sockets for user: {len(sockets)}")

    def unregister(self, user_id: int, websocket: WebSocket) -> None:
        sockets = self.connections.get(user_id)
        if not sockets:
            return
        if websocket in sockets:
            sockets.remove(websocket)
        if not sockets:
            del self.connections[user_id]
        logger.info(f"WebSocket unregistered for user {user_id}")

    def is_registered(self, user_id: int, websocket: Optional[WebSocket] = None) -> bool:
        sockets = self.connections.get(user_id) or []
        if websocket is None:
            return bool(sockets)
        return websocket in sockets

    def connection_count(self) -> int:
        return sum(len(sockets) for sockets in self.connections.values())

    async def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        """Hand the payload to the backend; it reaches whichever process holds the user's sockets."""
        await self.backend.publish(user_id, payload)

    async def deliver_local(self, user_id: int, payload: Dict[str, Any]) -> int:
        """
        Send to every socket this process holds for the user.

        Sockets that fail to send are pruned from the registry.

        Returns:
            Number of sockets the payload was written to
        """
        sockets = list(self.connections.get(user_id) or [])
        if not sockets:
            return 0

        message_str = json.dumps(payload, default=str)
        sent_count = 0
        dead_connections = []

        for ws in sockets:
            try:
                await ws.send_text(message_str)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to deliver notification to user {user_id}: {e}")
                dead_connections.append(ws)

        for ws in dead_connections:
            self.unregister(user_id, ws)

        return sent_count
