from typing import Any, Awaitable, Callable, Dict, Protocol

Deliver = Callable[[int, Dict[str, Any]], Awaitable[int]]


class NotificationBackend(Protocol):
    async def start(self, deliver: Deliver) -> None:
        ...

    async def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        ...

    async def stop(self) -> None:
        ...
