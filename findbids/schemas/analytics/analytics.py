# findbids/schemas/analytics/analytics.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date as date_type, datetime


class TrackViewRequest(BaseModel):
    rfp_id: int
    duration: int = Field(0, description="Seconds spent on the RFP page")


class TrackBidRequest(BaseModel):
    rfp_id: int


class AnalyticsResponse(BaseModel):
    rfp_id: int
    date: date_type
    total_views: int = 0
    unique_views: int = 0
    average_view_time: int = 0
    total_bids: int = 0
    click_through_rate: int = 0


class ViewSessionResponse(BaseModel):
    id: int
    rfp_id: int
    user_id: int
    view_date: datetime
    duration: int
    converted_to_bid: bool


class TrackResponse(BaseModel):
    success: bool = True
    skipped: bool = False
    analytics: Optional[AnalyticsResponse] = None
    session: Optional[ViewSessionResponse] = None


class BoostedAnalyticsResponse(AnalyticsResponse):
    title: str
    featured_at: Optional[datetime] = None
    status: str
