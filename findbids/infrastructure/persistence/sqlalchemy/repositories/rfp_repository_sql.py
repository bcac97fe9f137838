from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
from sqlalchemy import delete, func
from sqlmodel import Session, select

from .....db.models import Rfp, Rfi, RfiMessage, RfiAttachment, RfpAnalytics, RfpViewSession
from .....application.ports.rfp_repo import RfpRepository, RfpDto

UPDATABLE_FIELDS = {
    "title", "description", "walkthrough_date", "rfi_date", "deadline", "budget_min",
    "certification_goals", "job_location", "portfolio_link", "status", "featured", "featured_at",
}


class SqlRfpRepository(RfpRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, r: Rfp) -> RfpDto:
        return RfpDto(
            id=r.id,
            title=r.title,
            description=r.description,
            walkthrough_date=r.walkthrough_date,
            rfi_date=r.rfi_date,
            deadline=r.deadline,
            job_location=r.job_location,
            organization_id=r.organization_id,
            status=r.status,
            budget_min=r.budget_min,
            certification_goals=r.certification_goals,
            portfolio_link=r.portfolio_link,
            featured=bool(r.featured),
            featured_at=r.featured_at,
            created_at=r.created_at,
        )

    def get(self, rfp_id: int) -> Optional[RfpDto]:
        r = self.session.get(Rfp, rfp_id)
        return self._to_dto(r) if r else None

    def list_page(self, offset: int, limit: int) -> Tuple[List[RfpDto], int]:
        total = self.session.exec(select(func.count(Rfp.id))).one()
        rows = self.session.exec(
            select(Rfp).order_by(Rfp.created_at.desc(), Rfp.id.desc()).offset(offset).limit(limit)
        ).all()
        return [self._to_dto(r) for r in rows], int(total or 0)

    def list_featured(self) -> List[RfpDto]:
        rows = self.session.exec(
            select(Rfp).where(Rfp.featured == True).order_by(Rfp.featured_at.desc())  # noqa: E712
        ).all()
        return [self._to_dto(r) for r in rows]

    def list_for_owner(self, owner_id: int, featured_only: bool = False) -> List[RfpDto]:
        query = select(Rfp).where(Rfp.organization_id == owner_id)
        if featured_only:
            query = query.where(Rfp.featured == True)  # noqa: E712
        rows = self.session.exec(query.order_by(Rfp.created_at.desc(), Rfp.id.desc())).all()
        return [self._to_dto(r) for r in rows]

    def create(self, owner_id: int, fields: Dict[str, Any]) -> RfpDto:
        values = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        r = Rfp(organization_id=owner_id, **values)
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return self._to_dto(r)

    def update(self, rfp_id: int, fields: Dict[str, Any]) -> Optional[RfpDto]:
        r = self.session.get(Rfp, rfp_id)
        if not r:
            return None
        for name, value in fields.items():
            if name in UPDATABLE_FIELDS:
                setattr(r, name, value)
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return self._to_dto(r)

    def delete(self, rfp_id: int) -> None:
        rfi_ids = select(Rfi.id).where(Rfi.rfp_id == rfp_id)
        message_ids = select(RfiMessage.id).where(RfiMessage.rfi_id.in_(rfi_ids))
        for stmt in (
            delete(RfiAttachment).where(RfiAttachment.message_id.in_(message_ids)),
            delete(RfiMessage).where(RfiMessage.rfi_id.in_(rfi_ids)),
            delete(Rfi).where(Rfi.rfp_id == rfp_id),
            delete(RfpViewSession).where(RfpViewSession.rfp_id == rfp_id),
            delete(RfpAnalytics).where(RfpAnalytics.rfp_id == rfp_id),
            delete(Rfp).where(Rfp.id == rfp_id),
        ):
            self.session.exec(stmt.execution_options(synchronize_session=False))
        self.session.commit()
        self.session.expire_all()
