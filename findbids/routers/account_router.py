import logging
from fastapi import APIRouter, Depends, Request, Response

from ..config import settings
from ..application.ports.user_repo import UserDto
from ..application.services.account_service import AccountService
from ..dependencies import get_account_service, get_current_user
from ..schemas import UserSettingsUpdate, OnboardingRequest, UserResponse, MessageResponse
from .auth_router import user_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["Account"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/settings", response_model=UserResponse)
def update_settings(
    data: UserSettingsUpdate,
    current_user: UserDto = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
):
    updated = account_service.update_settings(current_user, data.model_dump(exclude_unset=True, exclude_none=True))
    return user_response(updated)


@router.post("/onboarding", response_model=UserResponse)
def complete_onboarding(
    data: OnboardingRequest,
    current_user: UserDto = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
):
    return user_response(account_service.complete_onboarding(current_user, data.model_dump()))


@router.post("/deactivate", response_model=UserResponse)
def deactivate(
    request: Request,
    response: Response,
    current_user: UserDto = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
):
    updated = account_service.deactivate(current_user, _client_ip(request))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return user_response(updated)


@router.delete("", response_model=MessageResponse)
def delete_account(
    request: Request,
    response: Response,
    current_user: UserDto = Depends(get_current_user),
    account_service: AccountService = Depends(get_account_service),
):
    account_service.delete_account(current_user, _client_ip(request))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return MessageResponse(message="Account deleted successfully")
