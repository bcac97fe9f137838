import logging
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from .config import settings
from .persistence.database import get_session
from .exceptions import UnauthorizedError
from .application.ports.user_repo import UserDto
from .application.services.auth_service import AuthService
from .application.services.account_service import AccountService
from .application.services.employee_service import EmployeeService
from .application.services.rfi_access import RfiAccessPolicy, RequestContext
from .application.services.notification_service import NotificationService
from .application.services.rfi_conversation_service import RfiConversationService
from .application.services.rfi_service import RfiService
from .application.services.rfp_service import RfpService
from .application.services.analytics_service import AnalyticsService
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.storage.local_storage import LocalStorageRepository
from .infrastructure.realtime.notification_hub import NotificationHub
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from .infrastructure.persistence.sqlalchemy.repositories.session_repository_sql import SqlSessionRepository
from .infrastructure.persistence.sqlalchemy.repositories.employee_repository_sql import SqlEmployeeRepository
from .infrastructure.persistence.sqlalchemy.repositories.rfp_repository_sql import SqlRfpRepository
from .infrastructure.persistence.sqlalchemy.repositories.rfi_repository_sql import SqlRfiRepository
from .infrastructure.persistence.sqlalchemy.repositories.notification_repository_sql import SqlNotificationRepository
from .infrastructure.persistence.sqlalchemy.repositories.analytics_repository_sql import SqlAnalyticsRepository

logger = logging.getLogger(__name__)

# Auth scheme; the session cookie is the fallback
oauth2_scheme = HTTPBearer(auto_error=False)

_audit_logger = StdAuditLogger()


def get_audit_logger() -> StdAuditLogger:
    return _audit_logger


def get_storage() -> LocalStorageRepository:
    return LocalStorageRepository()


def get_notification_hub(request: Request) -> NotificationHub:
    return request.app.state.notification_hub


def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(SqlUserRepository(session), SqlSessionRepository(session))


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserDto:
    token = extract_token(request, credentials)
    if not token:
        raise UnauthorizedError("Authentication required")
    user = auth_service.resolve(token)
    if not user:
        logger.warning("Session token rejected - invalid, expired or revoked")
        raise UnauthorizedError("Invalid or expired session")
    return user


def get_request_context(request: Request) -> RequestContext:
    return RequestContext(
        method=request.method,
        path=request.url.path,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_rfi_access_policy(
    session: Session = Depends(get_session),
    audit: StdAuditLogger = Depends(get_audit_logger),
) -> RfiAccessPolicy:
    return RfiAccessPolicy(SqlRfiRepository(session), SqlRfpRepository(session), audit)


def get_notification_service(
    session: Session = Depends(get_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> NotificationService:
    return NotificationService(SqlNotificationRepository(session), hub)


def get_conversation_service(
    session: Session = Depends(get_session),
    access: RfiAccessPolicy = Depends(get_rfi_access_policy),
    storage: LocalStorageRepository = Depends(get_storage),
    notifications: NotificationService = Depends(get_notification_service),
) -> RfiConversationService:
    return RfiConversationService(
        access=access,
        rfi_repo=SqlRfiRepository(session),
        user_repo=SqlUserRepository(session),
        storage=storage,
        notifications=notifications,
    )


def get_rfi_service(
    session: Session = Depends(get_session),
    access: RfiAccessPolicy = Depends(get_rfi_access_policy),
    notifications: NotificationService = Depends(get_notification_service),
) -> RfiService:
    return RfiService(
        rfi_repo=SqlRfiRepository(session),
        rfp_repo=SqlRfpRepository(session),
        user_repo=SqlUserRepository(session),
        access=access,
        notifications=notifications,
    )


def get_rfp_service(session: Session = Depends(get_session)) -> RfpService:
    return RfpService(SqlRfpRepository(session), SqlUserRepository(session))


def get_analytics_service(session: Session = Depends(get_session)) -> AnalyticsService:
    return AnalyticsService(SqlAnalyticsRepository(session), SqlRfpRepository(session))


def get_account_service(
    session: Session = Depends(get_session),
    audit: StdAuditLogger = Depends(get_audit_logger),
) -> AccountService:
    return AccountService(SqlUserRepository(session), SqlSessionRepository(session), audit)


def get_employee_service(session: Session = Depends(get_session)) -> EmployeeService:
    return EmployeeService(SqlEmployeeRepository(session))
