from typing import Any, Dict, Optional

from ...application.ports.notification_backend import NotificationBackend, Deliver


class InMemoryNotificationBackend(NotificationBackend):
    """Delivers straight to this process's sockets. Single instance only."""

    def __init__(self) -> None:
        self._deliver: Optional[Deliver] = None

    async def start(self, deliver: Deliver) -> None:
        self._deliver = deliver

    async def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        if self._deliver is None:
            raise RuntimeError("Notification backend not started")
        await self._deliver(user_id, payload)

    async def stop(self) -> None:
        self._deliver = None
