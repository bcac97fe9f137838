# findbids/schemas/rfps/rfp.py
from pydantic import BaseModel, Field, validator
from typing import List, Optional
from datetime import datetime

from ..users.user import UserSummary
from ...utils import ensure_utc


class RfpCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    walkthrough_date: datetime
    rfi_date: datetime
    deadline: datetime
    job_location: str = Field(..., min_length=1)
    budget_min: Optional[int] = Field(None, ge=0)
    certification_goals: Optional[str] = None
    portfolio_link: Optional[str] = None
    featured: bool = False

    @validator('title', 'job_location')
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be blank')
        return v.strip()

    @validator('walkthrough_date', 'rfi_date', 'deadline')
    def dates_in_utc(cls, v):
        return ensure_utc(v)


class RfpUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    walkthrough_date: Optional[datetime] = None
    rfi_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    job_location: Optional[str] = None
    budget_min: Optional[int] = Field(None, ge=0)
    certification_goals: Optional[str] = None
    portfolio_link: Optional[str] = None
    status: Optional[str] = Field(None, pattern="^(open|closed)$")
    featured: Optional[bool] = None

    @validator('walkthrough_date', 'rfi_date', 'deadline')
    def dates_in_utc(cls, v):
        return ensure_utc(v)


class RfpResponse(BaseModel):
    id: int
    title: str
    description: str
    walkthrough_date: datetime
    rfi_date: datetime
    deadline: datetime
    job_location: str
    budget_min: Optional[int] = None
    certification_goals: Optional[str] = None
    portfolio_link: Optional[str] = None
    status: str
    featured: bool
    featured_at: Optional[datetime] = None
    organization_id: Optional[int] = None
    organization: Optional[UserSummary] = None
    created_at: Optional[datetime] = None


class RfpListResponse(BaseModel):
    items: List[RfpResponse]
    total: int
    offset: int
    limit: int
