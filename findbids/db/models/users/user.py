# findbids/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime

from ....utils import utcnow

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(max_length=255, unique=True, index=True)
    password: str
    company_name: str = Field(max_length=255)
    contact: Optional[str] = Field(default=None)
    telephone: Optional[str] = Field(default=None)
    cell: Optional[str] = Field(default=None)
    business_email: Optional[str] = Field(default=None)
    is_minority_owned: bool = Field(default=False)
    minority_group: Optional[str] = Field(default=None)
    trade: Optional[str] = Field(default=None)
    certification_name: Optional[str] = Field(default=None)
    logo: Optional[str] = Field(default=None)
    onboarding_complete: bool = Field(default=False)
    status: str = Field(default="active")  # active | deactivated
    language: str = Field(default="en")
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
