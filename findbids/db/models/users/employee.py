# findbids/db/models/users/employee.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime

from ....utils import utcnow

class Employee(SQLModel, table=True):
    """Team member listed under an organization account."""
    __tablename__ = "employees"
    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="users.id", index=True)
    email: str = Field(max_length=255)
    role: str = Field(max_length=100)
    status: str = Field(default="pending")  # pending | active
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
