# findbids/schemas/common/common.py
from pydantic import BaseModel
from typing import Optional


class ErrorResponse(BaseModel):
    success: bool = False
    data: Optional[dict] = None
    error: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
    version: str
