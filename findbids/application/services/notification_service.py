import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from ...exceptions import NotFoundError
from ..ports.notification_repo import NotificationRepository, NotificationDto

logger = logging.getLogger(__name__)

RFI_RESPONSE = "rfi_response"
RFI_RECEIVED = "rfi_received"
RFI_STATUS = "rfi_status"


class NotificationPublisher(Protocol):
    async def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        ...


@dataclass
class NotificationService:
    repo: NotificationRepository
    hub: Optional[NotificationPublisher] = None

    async def create(self, user_id: int, type: str, title: str, message: str, related_id: Optional[int] = None, related_type: Optional[str] = None) -> NotificationDto:
        notification = self.repo.create(user_id, type, title, message, related_id, related_type)
        if self.hub is not None:
            try:
                await self.hub.publish(user_id, {"type": "notification", "data": notification.to_payload()})
            except Exception as e:
                # The row is stored; the client picks it up on its next fetch
                logger.warning(f"Realtime delivery failed for notification {notification.id}: {e}")
        return notification

    def list_for_user(self, user_id: int, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        return self.repo.list_for_user(user_id, unread_only=unread_only, limit=limit, offset=offset)

    def unread_count(self, user_id: int) -> int:
        return self.repo.unread_count(user_id)

    def mark_read(self, user_id: int, notification_id: int) -> None:
        if not self.repo.get_for_user(notification_id, user_id):
            raise NotFoundError("Notification not found")
        self.repo.mark_read(notification_id)

    def mark_all_read(self, user_id: int) -> int:
        return self.repo.mark_all_read(user_id)

    def delete(self, user_id: int, notification_id: int) -> None:
        if not self.repo.get_for_user(notification_id, user_id):
            raise NotFoundError("Notification not found")
        self.repo.delete(notification_id)
