from datetime import datetime
from typing import Optional
from sqlalchemy import delete
from sqlmodel import Session

from .....db.models import UserSession
from .....application.ports.session_repo import SessionRepository, SessionDto
from .....utils import ensure_utc


class SqlSessionRepository(SessionRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, s: UserSession) -> SessionDto:
        return SessionDto(id=s.id, user_id=s.user_id, expires_at=ensure_utc(s.expires_at), created_at=ensure_utc(s.created_at))

    def create(self, user_id: int, expires_at: datetime, ip_address: Optional[str], user_agent: Optional[str]) -> SessionDto:
        s = UserSession(user_id=user_id, expires_at=expires_at, ip_address=ip_address, user_agent=user_agent)
        self.session.add(s)
        self.session.commit()
        self.session.refresh(s)
        return self._to_dto(s)

    def get(self, session_id: str) -> Optional[SessionDto]:
        s = self.session.get(UserSession, session_id)
        return self._to_dto(s) if s else None

    def delete(self, session_id: str) -> None:
        s = self.session.get(UserSession, session_id)
        if not s:
            return
        self.session.delete(s)
        self.session.commit()

    def delete_for_user(self, user_id: int) -> int:
        result = self.session.exec(
            delete(UserSession).where(UserSession.user_id == user_id).execution_options(synchronize_session=False)
        )
        self.session.commit()
        self.session.expire_all()
        return result.rowcount or 0
