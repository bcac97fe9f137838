# findbids/db/models/marketplace/rfp.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime
from datetime import datetime

from ....utils import utcnow

class Rfp(SQLModel, table=True):
    __tablename__ = "rfps"
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    walkthrough_date: datetime = Field(sa_type=DateTime(timezone=True))
    rfi_date: datetime = Field(sa_type=DateTime(timezone=True))
    deadline: datetime = Field(sa_type=DateTime(timezone=True))
    budget_min: Optional[int] = Field(default=None)
    certification_goals: Optional[str] = Field(default=None)
    job_location: str
    portfolio_link: Optional[str] = Field(default=None)
    status: str = Field(default="open")  # open | closed
    organization_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    featured: bool = Field(default=False)
    featured_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
