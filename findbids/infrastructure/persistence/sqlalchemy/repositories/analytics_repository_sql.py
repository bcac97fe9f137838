from datetime import datetime, date, time, timedelta, timezone
from typing import Optional, Tuple
from sqlalchemy import func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import RfpAnalytics, RfpViewSession
from .....application.ports.analytics_repo import AnalyticsRepository, AnalyticsDto, ViewSessionDto
from .....utils import ensure_utc

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _day_bounds(day: date) -> Tuple[datetime, datetime]:
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class SqlAnalyticsRepository(AnalyticsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, a: RfpAnalytics) -> AnalyticsDto:
        return AnalyticsDto(
            id=a.id,
            rfp_id=a.rfp_id,
            date=a.date,
            total_views=a.total_views or 0,
            unique_views=a.unique_views or 0,
            average_view_time=a.average_view_time or 0,
            total_bids=a.total_bids or 0,
            click_through_rate=a.click_through_rate or 0,
        )

    def _view_to_dto(self, v: RfpViewSession) -> ViewSessionDto:
        return ViewSessionDto(
            id=v.id,
            rfp_id=v.rfp_id,
            user_id=v.user_id,
            view_date=v.view_date,
            duration=v.duration,
            converted_to_bid=bool(v.converted_to_bid),
        )

    def _ensure_day_row(self, rfp_id: int, day: date) -> None:
        """INSERT the zero row for (rfp_id, day) unless another writer got there first."""
        values = dict(
            rfp_id=rfp_id,
            date=day,
            total_views=0,
            unique_views=0,
            average_view_time=0,
            total_bids=0,
            click_through_rate=0,
        )
        dialect = self.session.get_bind().dialect.name
        insert_fn = _UPSERT_DIALECTS.get(dialect)
        if insert_fn is not None:
            stmt = insert_fn(RfpAnalytics.__table__).values(**values).on_conflict_do_nothing(
                index_elements=["rfp_id", "date"]
            )
            self.session.exec(stmt)
            return
        # Other backends: rely on the unique constraint inside a savepoint
        try:
            with self.session.begin_nested():
                self.session.exec(RfpAnalytics.__table__.insert().values(**values))
        except IntegrityError:
            pass

    def _reload(self, rfp_id: int, day: date) -> RfpAnalytics:
        return self.session.exec(
            select(RfpAnalytics)
            .where(RfpAnalytics.rfp_id == rfp_id)
            .where(RfpAnalytics.date == day)
            .execution_options(populate_existing=True)
        ).one()

    def record_view(self, rfp_id: int, user_id: int, duration: int, viewed_at: datetime) -> Tuple[ViewSessionDto, AnalyticsDto]:
        viewed_at = ensure_utc(viewed_at)
        day = viewed_at.date()
        day_start, next_day = _day_bounds(day)
        try:
            view = RfpViewSession(rfp_id=rfp_id, user_id=user_id, duration=duration, view_date=viewed_at)
            self.session.add(view)
            self.session.flush()

            self._ensure_day_row(rfp_id, day)

            distinct_viewers = (
                select(func.count(RfpViewSession.user_id.distinct()))
                .where(RfpViewSession.rfp_id == rfp_id)
                .where(RfpViewSession.view_date >= day_start)
                .where(RfpViewSession.view_date < next_day)
                .scalar_subquery()
            )
            views = RfpAnalytics.total_views
            average = RfpAnalytics.average_view_time
            # SET expressions see the pre-update row; (x + n // 2) // n rounds half up
            self.session.exec(
                update(RfpAnalytics)
                .where(RfpAnalytics.rfp_id == rfp_id)
                .where(RfpAnalytics.date == day)
                .values(
                    total_views=views + 1,
                    average_view_time=(average * views + duration + (views + 1) // 2) // (views + 1),
                    unique_views=distinct_viewers,
                )
                .execution_options(synchronize_session=False)
            )
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(view)
        return self._view_to_dto(view), self._to_dto(self._reload(rfp_id, day))

    def record_bid(self, rfp_id: int, user_id: int, bid_at: datetime) -> AnalyticsDto:
        bid_at = ensure_utc(bid_at)
        day = bid_at.date()
        day_start, next_day = _day_bounds(day)
        try:
            self._ensure_day_row(rfp_id, day)
            self.session.exec(
                update(RfpAnalytics)
                .where(RfpAnalytics.rfp_id == rfp_id)
                .where(RfpAnalytics.date == day)
                .values(total_bids=RfpAnalytics.total_bids + 1)
                .execution_options(synchronize_session=False)
            )
            latest_view = self.session.exec(
                select(RfpViewSession)
                .where(RfpViewSession.rfp_id == rfp_id)
                .where(RfpViewSession.user_id == user_id)
                .where(RfpViewSession.view_date >= day_start)
                .where(RfpViewSession.view_date < next_day)
                .order_by(RfpViewSession.view_date.desc(), RfpViewSession.id.desc())
            ).first()
            if latest_view and not latest_view.converted_to_bid:
                latest_view.converted_to_bid = True
                self.session.add(latest_view)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return self._to_dto(self._reload(rfp_id, day))

    def get_for_day(self, rfp_id: int, day: date) -> Optional[AnalyticsDto]:
        a = self.session.exec(
            select(RfpAnalytics).where(RfpAnalytics.rfp_id == rfp_id).where(RfpAnalytics.date == day)
        ).first()
        return self._to_dto(a) if a else None

    def latest_for_rfp(self, rfp_id: int) -> Optional[AnalyticsDto]:
        a = self.session.exec(
            select(RfpAnalytics).where(RfpAnalytics.rfp_id == rfp_id).order_by(RfpAnalytics.date.desc())
        ).first()
        return self._to_dto(a) if a else None
