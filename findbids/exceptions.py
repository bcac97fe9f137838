import logging
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .logging_utils import sanitize_for_logging

logger = logging.getLogger(__name__)


class APIException(HTTPException):
    status_code_default = 500
    detail_default = "Internal server error"

    def __init__(self, detail: str = None, status_code: int = None):
        super().__init__(
            status_code=status_code or self.status_code_default,
            detail=detail or self.detail_default,
        )


class UnauthorizedError(APIException):
    status_code_default = 401
    detail_default = "Authentication required"


class ForbiddenError(APIException):
    status_code_default = 403
    detail_default = "Unauthorized"


class NotFoundError(APIException):
    status_code_default = 404
    detail_default = "Resource not found"


class ValidationError(APIException):
    status_code_default = 400
    detail_default = "Invalid request"


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

def create_success_response(data) -> dict:
    """Create a standardized success response"""
    return {
        "success": True,
        "data": data,
        "error": None
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    # Convert 403 from HTTPBearer to 401 for missing authentication
    if exc.status_code == 403 and "Not authenticated" in str(exc.detail):
        return JSONResponse(
            status_code=401,
            content=create_error_response("Authentication required", 401)
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures get a generic message outside debug mode"""
    logger.info(f"Request validation failed on {request.url.path}: {sanitize_for_logging(exc.errors())}")
    message = str(exc.errors()) if settings.DEBUG else "Invalid request"
    return JSONResponse(status_code=400, content=create_error_response(message, 400))
