import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ...config import settings
from ...exceptions import UnauthorizedError, ValidationError
from ...logging_utils import mask_email
from ...utils import hash_password, verify_password, create_session_token, decode_session_token, utcnow, ensure_utc
from ..ports.session_repo import SessionRepository
from ..ports.user_repo import UserRepository, UserDto

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class IssuedSession:
    user: UserDto
    token: str
    expires_at: datetime


@dataclass
class AuthService:
    user_repo: UserRepository
    session_repo: SessionRepository
    session_minutes: int = settings.SESSION_MAX_AGE_MINUTES

    def _issue(self, user: UserDto, ip_address: Optional[str], user_agent: Optional[str]) -> IssuedSession:
        expires_at = utcnow() + timedelta(minutes=self.session_minutes)
        session = self.session_repo.create(user.id, expires_at, ip_address, user_agent)
        token = create_session_token(user.id, session.id, expires_at)
        return IssuedSession(user=user, token=token, expires_at=expires_at)

    def register(self, email: str, password: str, company_name: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> IssuedSession:
        email = (email or "").strip()
        if self.user_repo.get_by_email(email):
            raise ValidationError("Email already registered")
        user = self.user_repo.create(email, hash_password(password), company_name.strip())
        logger.info(f"Registered user {user.id} ({mask_email(user.email)})")
        return self._issue(user, ip_address, user_agent)

    def login(self, email: str, password: str, ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> IssuedSession:
        user = self.user_repo.get_by_email(email or "")
        if not user or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {mask_email(email)}")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if user.status == "deactivated":
            logger.info(f"Login refused for deactivated user {user.id}")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        return self._issue(user, ip_address, user_agent)

    def resolve(self, token: Optional[str]) -> Optional[UserDto]:
        """The user behind a session token, or None if the token or its session is no longer valid."""
        payload = decode_session_token(token)
        if not payload:
            return None
        session = self.session_repo.get(payload["sid"])
        if not session or str(session.user_id) != str(payload["sub"]):
            return None
        if ensure_utc(session.expires_at) <= utcnow():
            return None
        user = self.user_repo.get_by_id(session.user_id)
        if not user or user.status == "deactivated":
            return None
        return user

    def logout(self, token: Optional[str]) -> None:
        payload = decode_session_token(token)
        if payload:
            self.session_repo.delete(payload["sid"])
