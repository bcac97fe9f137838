import asyncio
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as aioredis

from ...application.ports.notification_backend import NotificationBackend, Deliver

logger = logging.getLogger(__name__)


class RedisNotificationBackend(NotificationBackend):
    """
    Fans notifications out over a Redis pub/sub channel.

    Every instance publishes ``{"user_id": .., "payload": ..}`` to the channel
    and runs one listener task that hands each message to its local sockets.
    The listener resubscribes after a lost connection, waiting ``retry_delay``
    seconds between attempts.
    """

    def __init__(self, url: str, channel: str, client: Optional[aioredis.Redis] = None, retry_delay: float = 1.0):
        self.url = url
        self.channel = channel
        self.retry_delay = retry_delay
        self._client = client
        self._pubsub = None
        self._listener: Optional[asyncio.Task] = None
        self._deliver: Optional[Deliver] = None

    async def start(self, deliver: Deliver) -> None:
        self._deliver = deliver
        if self._client is None:
            self._client = aioredis.from_url(self.url, decode_responses=True)
        await self._subscribe()
        self._listener = asyncio.create_task(self._listen())
        logger.info(f"Subscribed to notification channel {self.channel}")

    async def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        if self._client is None:
            raise RuntimeError("Notification backend not started")
        message = json.dumps({"user_id": user_id, "payload": payload}, default=str)
        await self._client.publish(self.channel, message)

    async def _subscribe(self) -> None:
        self._pubsub = self._client.pubsub()
        await self._pubsub.subscribe(self.channel)

    async def _drop_pubsub(self) -> None:
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.aclose()
        except Exception as e:
            logger.warning(f"Closing broken pub/sub connection failed: {e}")

    async def _listen(self) -> None:
        while True:
            try:
                if self._pubsub is None:
                    await self._subscribe()
                    logger.info(f"Resubscribed to notification channel {self.channel}")
                async for message in self._pubsub.listen():
                    if message.get("type") != "message":
                        continue
                    await self._handle(message.get("data"))
                logger.warning(f"Subscription to {self.channel} ended")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Notification listener lost channel {self.channel}: {e}", exc_info=True)
            await self._drop_pubsub()
            await asyncio.sleep(self.retry_delay)

    async def _handle(self, raw) -> None:
        try:
            envelope = json.loads(raw)
            user_id = int(envelope["user_id"])
            payload = envelope["payload"]
        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"Dropping malformed notification envelope: {e}")
            return
        try:
            await self._deliver(user_id, payload)
        except Exception as e:
            logger.error(f"Local delivery failed for user {user_id}: {e}", exc_info=True)

    async def stop(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.error(f"Notification listener failed: {e}", exc_info=True)
            self._listener = None
        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe(self.channel)
            except Exception as e:
                logger.warning(f"Unsubscribe from {self.channel} failed: {e}")
            await self._drop_pubsub()
        if self._client is not None:
            try:
                await self._client.aclose()
            except Exception as e:
                logger.warning(f"Closing Redis client failed: {e}")
            self._client = None
        self._deliver = None
