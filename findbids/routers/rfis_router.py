import logging
from typing import List, Optional, Tuple
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from starlette.datastructures import UploadFile

from ..config import settings
from ..exceptions import ValidationError
from ..application.ports.rfi_repo import RfiDto, RfiAttachmentDto
from ..application.ports.user_repo import UserDto
from ..application.services.rfi_access import RequestContext
from ..application.services.rfi_conversation_service import RfiConversationService, IncomingFile, ThreadMessage
from ..application.services.rfi_service import RfiService, RfiView
from ..dependencies import get_current_user, get_conversation_service, get_rfi_service, get_request_context
from ..schemas import (
    RfiCreate, RfiResponse, RfiStatusUpdate, BulkStatusUpdate, BulkStatusResponse,
    RfiMessageResponse, AttachmentResponse, UserSummary, MessageResponse,
)
from .rfps_router import rfp_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["RFIs"])


def rfi_response(rfi: RfiDto, view: Optional[RfiView] = None) -> RfiResponse:
    return RfiResponse(
        id=rfi.id,
        rfp_id=rfi.rfp_id,
        email=rfi.email,
        message=rfi.message,
        status=rfi.status,
        created_at=rfi.created_at,
        company_name=view.submitter_company if view else None,
        rfp=rfp_response(view.rfp) if view and view.rfp else None,
    )


def _attachment_response(a: RfiAttachmentDto) -> AttachmentResponse:
    return AttachmentResponse(
        id=a.id,
        filename=a.filename,
        file_url=a.file_url,
        file_size=a.file_size,
        mime_type=a.mime_type,
        created_at=a.created_at,
    )


def message_response(item: ThreadMessage) -> RfiMessageResponse:
    m = item.message
    sender = item.sender
    return RfiMessageResponse(
        id=m.id,
        rfi_id=m.rfi_id,
        sender_id=m.sender_id,
        message=m.message,
        created_at=m.created_at,
        sender=(
            UserSummary(id=sender.id, company_name=sender.company_name, email=sender.email, logo=sender.logo)
            if sender else None
        ),
        attachments=[_attachment_response(a) for a in item.attachments],
    )


async def _read_message_payload(request: Request) -> Tuple[Optional[str], List[IncomingFile]]:
    """Accept multipart (``message`` + ``attachment`` files) or a JSON ``{"message": ...}`` body."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        text = form.get("message")
        if text is not None and not isinstance(text, str):
            raise ValidationError("Invalid message field")
        uploads = [f for f in form.getlist("attachment") if isinstance(f, UploadFile)]
        if len(uploads) > settings.MAX_ATTACHMENTS_PER_MESSAGE:
            raise ValidationError(f"At most {settings.MAX_ATTACHMENTS_PER_MESSAGE} attachments are allowed per message")
        files = []
        for upload in uploads:
            data = await upload.read()
            files.append(IncomingFile(
                filename=upload.filename or "file",
                content_type=upload.content_type or "application/octet-stream",
                data=data,
            ))
        return text, files

    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid request")
    if not isinstance(body, dict):
        raise ValidationError("Invalid request")
    text = body.get("message")
    if text is not None and not isinstance(text, str):
        raise ValidationError("Invalid message field")
    return text, []


@router.post("/rfps/{rfp_id}/rfi", response_model=RfiResponse, status_code=201)
async def submit_rfi(
    rfp_id: int,
    data: RfiCreate,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    rfi = await rfi_service.submit(current_user, rfp_id, data.message)
    logger.info(f"User {current_user.id} submitted RFI {rfi.id} on RFP {rfp_id}")
    return rfi_response(rfi)


@router.get("/rfps/{rfp_id}/rfi", response_model=List[RfiResponse])
def list_rfp_rfis(
    rfp_id: int,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    return [rfi_response(v.rfi, v) for v in rfi_service.list_for_rfp(current_user, rfp_id)]


@router.put("/rfps/{rfp_id}/rfi/{rfi_id}/status", response_model=RfiResponse)
async def update_rfi_status(
    rfp_id: int,
    rfi_id: int,
    data: RfiStatusUpdate,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    rfi = await rfi_service.update_status(current_user, rfp_id, rfi_id, data.status)
    return rfi_response(rfi)


@router.get("/rfis", response_model=List[RfiResponse])
def list_my_rfis(
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    return [rfi_response(v.rfi, v) for v in rfi_service.list_mine(current_user)]


@router.get("/rfis/received", response_model=List[RfiResponse])
def list_received_rfis(
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    return [rfi_response(v.rfi, v) for v in rfi_service.list_received(current_user)]


@router.put("/rfis/bulk-status", response_model=BulkStatusResponse)
async def bulk_update_rfi_status(
    data: BulkStatusUpdate,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
):
    updated = await rfi_service.bulk_update_status(current_user, data.status, data.rfi_ids)
    return BulkStatusResponse(updated=updated)


@router.delete("/rfis/{rfi_id}", response_model=MessageResponse)
def delete_rfi(
    rfi_id: int,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
    context: RequestContext = Depends(get_request_context),
):
    rfi_service.delete(current_user, rfi_id, context)
    logger.info(f"User {current_user.id} deleted RFI {rfi_id}")
    return MessageResponse(message="RFI deleted")


@router.get("/rfis/{rfi_id}/messages", response_model=List[RfiMessageResponse])
def list_rfi_messages(
    rfi_id: int,
    current_user: UserDto = Depends(get_current_user),
    conversation: RfiConversationService = Depends(get_conversation_service),
    context: RequestContext = Depends(get_request_context),
):
    return [message_response(m) for m in conversation.list_messages(current_user, rfi_id, context)]


@router.post("/rfis/{rfi_id}/messages", response_model=RfiMessageResponse, status_code=201)
async def post_rfi_message(
    rfi_id: int,
    request: Request,
    current_user: UserDto = Depends(get_current_user),
    conversation: RfiConversationService = Depends(get_conversation_service),
    context: RequestContext = Depends(get_request_context),
):
    text, files = await _read_message_payload(request)
    created = await conversation.post_message(current_user, rfi_id, text, files, context)
    logger.info(f"User {current_user.id} posted message {created.message.id} on RFI {rfi_id} with {len(created.attachments)} attachment(s)")
    return message_response(created)


@router.get("/attachments/{attachment_id}/download")
def download_attachment(
    attachment_id: int,
    current_user: UserDto = Depends(get_current_user),
    rfi_service: RfiService = Depends(get_rfi_service),
    context: RequestContext = Depends(get_request_context),
):
    url = rfi_service.attachment_download_url(current_user, attachment_id, context)
    return RedirectResponse(url=url, status_code=307)
