# findbids/db/models/analytics/analytics.py
from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime, UniqueConstraint
from datetime import datetime, date as date_type

from ....utils import utcnow

class RfpAnalytics(SQLModel, table=True):
    __tablename__ = "rfp_analytics"
    __table_args__ = (UniqueConstraint("rfp_id", "date", name="uq_rfp_analytics_rfp_date"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    rfp_id: int = Field(foreign_key="rfps.id", index=True)
    date: date_type
    total_views: int = Field(default=0)
    unique_views: int = Field(default=0)
    average_view_time: int = Field(default=0)  # seconds
    total_bids: int = Field(default=0)
    click_through_rate: int = Field(default=0)


class RfpViewSession(SQLModel, table=True):
    __tablename__ = "rfp_view_sessions"
    id: Optional[int] = Field(default=None, primary_key=True)
    rfp_id: int = Field(foreign_key="rfps.id", index=True)
    user_id: int = Field(foreign_key="users.id")
    view_date: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    duration: int = Field(default=0)  # seconds
    converted_to_bid: bool = Field(default=False)
