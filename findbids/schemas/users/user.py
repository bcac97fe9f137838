# findbids/schemas/users/user.py
from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

from ..auth.auth import _check_email


class UserResponse(BaseModel):
    id: int
    email: str
    company_name: str
    status: str
    logo: Optional[str] = None
    contact: Optional[str] = None
    telephone: Optional[str] = None
    trade: Optional[str] = None
    certification_name: Optional[str] = None
    cell: Optional[str] = None
    business_email: Optional[str] = None
    is_minority_owned: bool = False
    minority_group: Optional[str] = None
    onboarding_complete: bool = False
    language: str = "en"
    created_at: datetime


class UserSummary(BaseModel):
    id: int
    company_name: str
    email: Optional[str] = None
    logo: Optional[str] = None


class UserSettingsUpdate(BaseModel):
    company_name: Optional[str] = Field(None, max_length=255)
    contact: Optional[str] = Field(None, max_length=255)
    telephone: Optional[str] = Field(None, max_length=50)
    cell: Optional[str] = Field(None, max_length=50)
    business_email: Optional[str] = Field(None, max_length=255)
    is_minority_owned: Optional[bool] = None
    minority_group: Optional[str] = Field(None, max_length=255)
    trade: Optional[str] = Field(None, max_length=255)
    certification_name: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = None
    language: Optional[str] = Field(None, min_length=2, max_length=10)

    @validator('business_email')
    def validate_business_email(cls, v):
        return _check_email(v) if v else v


class OnboardingRequest(BaseModel):
    contact: str = Field(..., min_length=1, max_length=255)
    telephone: str = Field(..., min_length=1, max_length=50)
    cell: str = Field(..., min_length=1, max_length=50)
    business_email: str = Field(..., max_length=255)
    is_minority_owned: bool
    minority_group: Optional[str] = Field(None, max_length=255)
    trade: str = Field(..., min_length=1, max_length=255)
    certification_name: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = None

    @validator('business_email')
    def validate_business_email(cls, v):
        return _check_email(v)

    @validator('contact', 'telephone', 'cell', 'trade')
    def not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field is required')
        return v.strip()
