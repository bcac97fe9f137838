from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from ...exceptions import ForbiddenError, NotFoundError, ValidationError
from ...utils import utcnow
from ..ports.analytics_repo import AnalyticsRepository, AnalyticsDto, ViewSessionDto
from ..ports.rfp_repo import RfpRepository, RfpDto
from ..ports.user_repo import UserDto


@dataclass
class TrackResult:
    skipped: bool
    analytics: Optional[AnalyticsDto] = None
    session: Optional[ViewSessionDto] = None


@dataclass
class AnalyticsService:
    repo: AnalyticsRepository
    rfp_repo: RfpRepository
    clock: Callable[[], datetime] = field(default=utcnow)

    def _get_rfp(self, rfp_id: int) -> RfpDto:
        rfp = self.rfp_repo.get(rfp_id)
        if not rfp:
            raise NotFoundError("RFP not found")
        return rfp

    def track_view(self, user: UserDto, rfp_id: int, duration: int) -> TrackResult:
        if duration is None or duration < 0:
            raise ValidationError("Duration must be a non-negative number of seconds")
        rfp = self._get_rfp(rfp_id)
        # Owners browsing their own listing are not counted
        if rfp.organization_id == user.id:
            return TrackResult(skipped=True)
        session, analytics = self.repo.record_view(rfp_id, user.id, int(duration), self.clock())
        return TrackResult(skipped=False, analytics=analytics, session=session)

    def track_bid(self, user: UserDto, rfp_id: int) -> TrackResult:
        rfp = self._get_rfp(rfp_id)
        if rfp.organization_id == user.id:
            return TrackResult(skipped=True)
        return TrackResult(skipped=False, analytics=self.repo.record_bid(rfp_id, user.id, self.clock()))

    def rfp_analytics(self, user: UserDto, rfp_id: int) -> AnalyticsDto:
        rfp = self._get_rfp(rfp_id)
        if rfp.organization_id != user.id:
            raise ForbiddenError("Unauthorized")
        analytics = self.repo.get_for_day(rfp_id, self.clock().date())
        if not analytics:
            raise NotFoundError("No analytics recorded today")
        return analytics

    def boosted_analytics(self, user: UserDto) -> List[Tuple[RfpDto, AnalyticsDto]]:
        """Latest analytics per featured RFP; a zero row stands in until the first view."""
        results = []
        today = self.clock().date()
        for rfp in self.rfp_repo.list_for_owner(user.id, featured_only=True):
            analytics = self.repo.latest_for_rfp(rfp.id) or AnalyticsDto(rfp_id=rfp.id, date=today)
            results.append((rfp, analytics))
        return results
