from dataclasses import dataclass
from typing import Optional, Tuple
from datetime import datetime, date


@dataclass
class AnalyticsDto:
    rfp_id: int
    date: date
    total_views: int = 0
    unique_views: int = 0
    average_view_time: int = 0
    total_bids: int = 0
    click_through_rate: int = 0
    id: Optional[int] = None


@dataclass
class ViewSessionDto:
    id: int
    rfp_id: int
    user_id: int
    view_date: datetime
    duration: int
    converted_to_bid: bool


class AnalyticsRepository:
    def record_view(self, rfp_id: int, user_id: int, duration: int, viewed_at: datetime) -> Tuple[ViewSessionDto, AnalyticsDto]:
        """Insert a view session and fold it into the aggregate for viewed_at's day in one transaction."""
        ...

    def record_bid(self, rfp_id: int, user_id: int, bid_at: datetime) -> AnalyticsDto:
        ...

    def get_for_day(self, rfp_id: int, day: date) -> Optional[AnalyticsDto]:
        ...

    def latest_for_rfp(self, rfp_id: int) -> Optional[AnalyticsDto]:
        ...
