from dataclasses import dataclass, asdict
from typing import List, Optional, Dict, Any
from datetime import datetime


@dataclass
class NotificationDto:
    id: int
    user_id: int
    type: str
    title: str
    message: str
    related_id: Optional[int]
    related_type: Optional[str]
    is_read: bool
    created_at: datetime

    def to_payload(self) -> Dict[str, Any]:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


class NotificationRepository:
    def create(self, user_id: int, type: str, title: str, message: str, related_id: Optional[int], related_type: Optional[str]) -> NotificationDto:
        ...

    def list_for_user(self, user_id: int, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        ...

    def get_for_user(self, notification_id: int, user_id: int) -> Optional[NotificationDto]:
        ...

    def mark_read(self, notification_id: int) -> None:
        ...

    def mark_all_read(self, user_id: int) -> int:
        ...

    def delete(self, notification_id: int) -> None:
        ...

    def unread_count(self, user_id: int) -> int:
        ...
