# findbids/schemas/rfis/rfi.py
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from datetime import datetime

from ..rfps.rfp import RfpResponse
from ..users.user import UserSummary

RfiStatus = Literal["pending", "responded"]


class RfiCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=10000)


class RfiResponse(BaseModel):
    id: int
    rfp_id: Optional[int] = None
    email: str
    message: str
    status: str
    created_at: datetime
    company_name: Optional[str] = None
    rfp: Optional[RfpResponse] = None


class RfiStatusUpdate(BaseModel):
    status: RfiStatus


class BulkStatusUpdate(BaseModel):
    status: RfiStatus
    rfi_ids: Optional[List[int]] = None


class BulkStatusResponse(BaseModel):
    success: bool = True
    updated: int


class AttachmentResponse(BaseModel):
    id: int
    filename: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: datetime


class RfiMessageResponse(BaseModel):
    id: int
    rfi_id: int
    sender_id: int
    message: str
    created_at: datetime
    sender: Optional[UserSummary] = None
    attachments: List[AttachmentResponse] = []
