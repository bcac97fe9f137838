import logging
from fastapi import APIRouter, Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials

from ..config import settings
from ..application.ports.user_repo import UserDto
from ..application.services.auth_service import AuthService, IssuedSession
from ..dependencies import get_auth_service, get_current_user, extract_token, oauth2_scheme
from ..schemas import RegisterRequest, LoginRequest, UserResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


def user_response(user: UserDto) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        company_name=user.company_name,
        status=user.status,
        logo=user.logo,
        contact=user.contact,
        telephone=user.telephone,
        trade=user.trade,
        certification_name=user.certification_name,
        cell=user.cell,
        business_email=user.business_email,
        is_minority_owned=user.is_minority_owned,
        minority_group=user.minority_group,
        onboarding_complete=user.onboarding_complete,
        language=user.language,
        created_at=user.created_at,
    )


def _set_session_cookie(response: Response, issued: IssuedSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=issued.token,
        max_age=settings.SESSION_MAX_AGE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


def _client_info(request: Request):
    return (request.client.host if request.client else None), request.headers.get("user-agent")


@router.post("/register", response_model=UserResponse, status_code=201)
def register(
    data: RegisterRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    ip_address, user_agent = _client_info(request)
    issued = auth_service.register(data.email, data.password, data.company_name, ip_address, user_agent)
    _set_session_cookie(response, issued)
    return user_response(issued.user)


@router.post("/login", response_model=UserResponse)
def login(
    data: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
):
    ip_address, user_agent = _client_info(request)
    issued = auth_service.login(data.email, data.password, ip_address, user_agent)
    logger.info(f"User {issued.user.id} logged in")
    _set_session_cookie(response, issued)
    return user_response(issued.user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme),
    current_user: UserDto = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    auth_service.logout(extract_token(request, credentials))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    logger.info(f"User {current_user.id} logged out")
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
def get_user(current_user: UserDto = Depends(get_current_user)):
    return user_response(current_user)
