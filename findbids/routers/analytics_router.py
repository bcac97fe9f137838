import logging
from typing import List
from fastapi import APIRouter, Depends

from ..application.ports.analytics_repo import AnalyticsDto, ViewSessionDto
from ..application.ports.user_repo import UserDto
from ..application.services.analytics_service import AnalyticsService, TrackResult
from ..dependencies import get_current_user, get_analytics_service
from ..schemas import (
    TrackViewRequest, TrackBidRequest, TrackResponse, AnalyticsResponse,
    ViewSessionResponse, BoostedAnalyticsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

_COUNTERS = ("total_views", "unique_views", "average_view_time", "total_bids", "click_through_rate")


def analytics_response(a: AnalyticsDto) -> AnalyticsResponse:
    return AnalyticsResponse(rfp_id=a.rfp_id, date=a.date, **{name: getattr(a, name) for name in _COUNTERS})


def _session_response(s: ViewSessionDto) -> ViewSessionResponse:
    return ViewSessionResponse(
        id=s.id,
        rfp_id=s.rfp_id,
        user_id=s.user_id,
        view_date=s.view_date,
        duration=s.duration,
        converted_to_bid=s.converted_to_bid,
    )


def _track_response(result: TrackResult) -> TrackResponse:
    if result.skipped:
        return TrackResponse(skipped=True)
    return TrackResponse(
        analytics=analytics_response(result.analytics),
        session=_session_response(result.session) if result.session else None,
    )


@router.post("/track-view", response_model=TrackResponse, response_model_exclude_none=True)
def track_view(
    data: TrackViewRequest,
    current_user: UserDto = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _track_response(service.track_view(current_user, data.rfp_id, data.duration))


@router.post("/track-bid", response_model=TrackResponse, response_model_exclude_none=True)
def track_bid(
    data: TrackBidRequest,
    current_user: UserDto = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return _track_response(service.track_bid(current_user, data.rfp_id))


@router.get("/boosted", response_model=List[BoostedAnalyticsResponse])
def boosted_analytics(
    current_user: UserDto = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return [
        BoostedAnalyticsResponse(
            rfp_id=rfp.id,
            date=analytics.date,
            title=rfp.title,
            featured_at=rfp.featured_at,
            status=rfp.status,
            **{name: getattr(analytics, name) for name in _COUNTERS},
        )
        for rfp, analytics in service.boosted_analytics(current_user)
    ]


@router.get("/rfp/{rfp_id}", response_model=AnalyticsResponse)
def rfp_analytics(
    rfp_id: int,
    current_user: UserDto = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return analytics_response(service.rfp_analytics(current_user, rfp_id))
