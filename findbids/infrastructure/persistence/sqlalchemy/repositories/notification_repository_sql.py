from typing import List, Optional
from sqlalchemy import func, update
from sqlmodel import Session, select

from .....db.models import Notification
from .....application.ports.notification_repo import NotificationRepository, NotificationDto


class SqlNotificationRepository(NotificationRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, n: Notification) -> NotificationDto:
        return NotificationDto(
            id=n.id,
            user_id=n.user_id,
            type=n.type,
            title=n.title,
            message=n.message,
            related_id=n.related_id,
            related_type=n.related_type,
            is_read=bool(n.is_read),
            created_at=n.created_at,
        )

    def create(self, user_id: int, type: str, title: str, message: str, related_id: Optional[int], related_type: Optional[str]) -> NotificationDto:
        n = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_id=related_id,
            related_type=related_type,
            is_read=False,
        )
        self.session.add(n)
        self.session.commit()
        self.session.refresh(n)
        return self._to_dto(n)

    def list_for_user(self, user_id: int, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[NotificationDto]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712
        rows = self.session.exec(
            query.order_by(Notification.created_at.desc(), Notification.id.desc()).offset(offset).limit(limit)
        ).all()
        return [self._to_dto(n) for n in rows]

    def get_for_user(self, notification_id: int, user_id: int) -> Optional[NotificationDto]:
        n = self.session.exec(
            select(Notification)
            .where(Notification.id == notification_id)
            .where(Notification.user_id == user_id)
        ).first()
        return self._to_dto(n) if n else None

    def mark_read(self, notification_id: int) -> None:
        n = self.session.get(Notification, notification_id)
        if not n or n.is_read:
            return
        n.is_read = True
        self.session.add(n)
        self.session.commit()

    def mark_all_read(self, user_id: int) -> int:
        result = self.session.exec(
            update(Notification)
            .where(Notification.user_id == user_id)
            .where(Notification.is_read == False)  # noqa: E712
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        self.session.expire_all()
        return result.rowcount or 0

    def delete(self, notification_id: int) -> None:
        n = self.session.get(Notification, notification_id)
        if not n:
            return
        self.session.delete(n)
        self.session.commit()

    def unread_count(self, user_id: int) -> int:
        count = self.session.exec(
            select(func.count(Notification.id))
            .where(Notification.user_id == user_id)
            .where(Notification.is_read == False)  # noqa: E712
        ).one()
        return int(count or 0)
