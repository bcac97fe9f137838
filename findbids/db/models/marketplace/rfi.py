# findbids/db/models/marketplace/rfi.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime

from ....utils import utcnow

class Rfi(SQLModel, table=True):
    __tablename__ = "rfis"
    id: Optional[int] = Field(default=None, primary_key=True)
    rfp_id: Optional[int] = Field(default=None, foreign_key="rfps.id", index=True)
    # Submitter identity; not a hard foreign key to users
    email: str = Field(index=True)
    message: str
    status: str = Field(default="pending")  # pending | responded
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class RfiMessage(SQLModel, table=True):
    __tablename__ = "rfi_messages"
    id: Optional[int] = Field(default=None, primary_key=True)
    rfi_id: int = Field(foreign_key="rfis.id", index=True)
    sender_id: int = Field(foreign_key="users.id")
    message: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class RfiAttachment(SQLModel, table=True):
    __tablename__ = "rfi_attachments"
    id: Optional[int] = Field(default=None, primary_key=True)
    message_id: int = Field(foreign_key="rfi_messages.id", index=True)
    filename: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
