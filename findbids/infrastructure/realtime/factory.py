import logging

from ...config import Settings
from .notification_hub import NotificationHub
from .memory_backend import InMemoryNotificationBackend

logger = logging.getLogger(__name__)


def build_notification_hub(settings: Settings) -> NotificationHub:
    backend_name = (settings.NOTIFICATION_BACKEND or "memory").lower()
    if backend_name == "redis":
        from .redis_backend import RedisNotificationBackend
        return NotificationHub(RedisNotificationBackend(
            settings.REDIS_URL,
            settings.NOTIFICATION_CHANNEL,
            retry_delay=settings.NOTIFICATION_RETRY_SECONDS,
        ))
    if backend_name != "memory":
        logger.warning(f"Unknown NOTIFICATION_BACKEND '{backend_name}', using in-memory delivery")
    return NotificationHub(InMemoryNotificationBackend())
