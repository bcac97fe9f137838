from typing import Optional, Dict, Any
from sqlalchemy import delete, func, or_
from sqlmodel import Session, select

from .....db.models import (
    User, UserSession, Employee, Notification, Rfp, Rfi, RfiMessage, RfiAttachment,
    RfpAnalytics, RfpViewSession,
)
from .....application.ports.user_repo import UserRepository, UserDto

# Columns a profile update may touch; identity and credentials go through dedicated paths
UPDATABLE_FIELDS = {
    "company_name", "contact", "telephone", "cell", "business_email", "is_minority_owned",
    "minority_group", "trade", "certification_name", "logo", "onboarding_complete",
    "status", "language",
}

class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            email=user.email,
            company_name=user.company_name,
            status=user.status or "active",
            created_at=user.created_at,
            logo=user.logo,
            contact=user.contact,
            telephone=user.telephone,
            trade=user.trade,
            certification_name=user.certification_name,
            cell=user.cell,
            business_email=user.business_email,
            is_minority_owned=bool(user.is_minority_owned),
            minority_group=user.minority_group,
            onboarding_complete=bool(user.onboarding_complete),
            language=user.language or "en",
            password_hash=user.password,
        )

    def get_by_id(self, user_id: int) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(func.lower(User.email) == email.strip().lower())).first()
        return self._to_dto(user) if user else None

    def create(self, email: str, password_hash: str, company_name: str) -> UserDto:
        user = User(email=email.strip(), password=password_hash, company_name=company_name)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)

    def update_fields(self, user_id: int, fields: Dict[str, Any]) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        if not user:
            return None
        for name, value in fields.items():
            if name in UPDATABLE_FIELDS:
                setattr(user, name, value)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)

    def delete(self, user_id: int) -> None:
        """Remove the user together with every row that references it."""
        user = self.session.get(User, user_id)
        if not user:
            return
        rfp_ids = select(Rfp.id).where(Rfp.organization_id == user_id)
        rfi_ids = select(Rfi.id).where(
            or_(Rfi.rfp_id.in_(rfp_ids), func.lower(Rfi.email) == user.email.strip().lower())
        )
        message_ids = select(RfiMessage.id).where(
            or_(RfiMessage.rfi_id.in_(rfi_ids), RfiMessage.sender_id == user_id)
        )
        for stmt in (
            delete(RfiAttachment).where(RfiAttachment.message_id.in_(message_ids)),
            delete(RfiMessage).where(or_(RfiMessage.rfi_id.in_(rfi_ids), RfiMessage.sender_id == user_id)),
            delete(Rfi).where(Rfi.id.in_(rfi_ids)),
            delete(RfpViewSession).where(or_(RfpViewSession.rfp_id.in_(rfp_ids), RfpViewSession.user_id == user_id)),
            delete(RfpAnalytics).where(RfpAnalytics.rfp_id.in_(rfp_ids)),
            delete(Rfp).where(Rfp.organization_id == user_id),
            delete(Notification).where(Notification.user_id == user_id),
            delete(Employee).where(Employee.organization_id == user_id),
            delete(UserSession).where(UserSession.user_id == user_id),
            delete(User).where(User.id == user_id),
        ):
            self.session.exec(stmt.execution_options(synchronize_session=False))
        self.session.commit()
        self.session.expire_all()
