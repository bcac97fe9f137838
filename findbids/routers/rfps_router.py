import logging
from typing import List
from fastapi import APIRouter, Depends, Query

from ..application.ports.rfp_repo import RfpDto
from ..application.ports.user_repo import UserDto
from ..application.services.rfp_service import RfpService, RfpView
from ..dependencies import get_current_user, get_rfp_service
from ..schemas import RfpCreate, RfpUpdate, RfpResponse, RfpListResponse, UserSummary, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/rfps", tags=["RFPs"])


def rfp_response(rfp: RfpDto, organization: UserDto = None) -> RfpResponse:
    return RfpResponse(
        id=rfp.id,
        title=rfp.title,
        description=rfp.description,
        walkthrough_date=rfp.walkthrough_date,
        rfi_date=rfp.rfi_date,
        deadline=rfp.deadline,
        job_location=rfp.job_location,
        budget_min=rfp.budget_min,
        certification_goals=rfp.certification_goals,
        portfolio_link=rfp.portfolio_link,
        status=rfp.status,
        featured=rfp.featured,
        featured_at=rfp.featured_at,
        organization_id=rfp.organization_id,
        organization=(
            UserSummary(id=organization.id, company_name=organization.company_name, logo=organization.logo)
            if organization else None
        ),
        created_at=rfp.created_at,
    )


def _view_response(view: RfpView) -> RfpResponse:
    return rfp_response(view.rfp, view.organization)


@router.get("", response_model=RfpListResponse)
def list_rfps(
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    rfp_service: RfpService = Depends(get_rfp_service),
):
    views, total = rfp_service.list(offset, limit)
    return RfpListResponse(items=[_view_response(v) for v in views], total=total, offset=offset, limit=limit)


@router.get("/featured", response_model=List[RfpResponse])
def list_featured_rfps(rfp_service: RfpService = Depends(get_rfp_service)):
    return [_view_response(v) for v in rfp_service.list_featured()]


@router.get("/{rfp_id}", response_model=RfpResponse)
def get_rfp(rfp_id: int, rfp_service: RfpService = Depends(get_rfp_service)):
    return _view_response(rfp_service.get(rfp_id))


@router.post("", response_model=RfpResponse, status_code=201)
def create_rfp(
    data: RfpCreate,
    current_user: UserDto = Depends(get_current_user),
    rfp_service: RfpService = Depends(get_rfp_service),
):
    rfp = rfp_service.create(current_user, data.model_dump())
    logger.info(f"User {current_user.id} created RFP {rfp.id}")
    return rfp_response(rfp, current_user)


@router.put("/{rfp_id}", response_model=RfpResponse)
def update_rfp(
    rfp_id: int,
    data: RfpUpdate,
    current_user: UserDto = Depends(get_current_user),
    rfp_service: RfpService = Depends(get_rfp_service),
):
    rfp = rfp_service.update(current_user, rfp_id, data.model_dump(exclude_unset=True, exclude_none=True))
    return rfp_response(rfp, current_user)


@router.delete("/{rfp_id}", response_model=MessageResponse)
def delete_rfp(
    rfp_id: int,
    current_user: UserDto = Depends(get_current_user),
    rfp_service: RfpService = Depends(get_rfp_service),
):
    rfp_service.delete(current_user, rfp_id)
    logger.info(f"User {current_user.id} deleted RFP {rfp_id}")
    return MessageResponse(message="RFP deleted")
