# findbids/schemas/employees/employee.py
from pydantic import BaseModel, Field, validator
from datetime import datetime

from ..auth.auth import _check_email


class EmployeeCreate(BaseModel):
    email: str = Field(..., max_length=255)
    role: str = Field(..., min_length=1, max_length=100)

    @validator('email')
    def validate_email(cls, v):
        return _check_email(v)

    @validator('role')
    def validate_role(cls, v):
        if not v.strip():
            raise ValueError('Role is required')
        return v.strip()


class EmployeeResponse(BaseModel):
    id: int
    organization_id: int
    email: str
    role: str
    status: str
    created_at: datetime
