# findbids/db/models/notifications/notification.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime

from ....utils import utcnow

class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: str
    title: str
    message: str
    related_id: Optional[int] = Field(default=None)
    related_type: Optional[str] = Field(default=None)
    is_read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
