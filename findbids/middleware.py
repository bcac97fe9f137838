import time
import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from .config import settings
from .exceptions import create_error_response
from .application.ports.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, limiter: RateLimiter, rate_limit: int = None, enabled: bool = True):
        super().__init__(app)
        self.limiter = limiter
        self.rate_limit = rate_limit or settings.RATE_LIMIT_PER_MINUTE
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or request.url.path == "/health":
            return await call_next(request)

        # Get client IP
        client_ip = request.client.host if request.client else "unknown"

        # Check rate limit
        if not self.limiter.allow(f"ip:{client_ip}", self.rate_limit, 60):
            logger.warning(f"Rate limit exceeded for IP: {client_ip}")
            return JSONResponse(
                status_code=429,
                content=create_error_response("Rate limit exceeded. Please try again later.", 429)
            )

        return await call_next(request)

class SecurityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Add security headers
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if settings.COOKIE_SECURE:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        # Log request (guard against missing client info)
        client_host = request.client.host if request.client else "unknown"
        logger.info(f"Request: {request.method} {request.url.path} from {client_host}")

        # Process request
        response = await call_next(request)

        # Calculate duration
        duration = time.time() - start_time

        # Log response
        logger.info(f"Response: {request.method} {request.url.path} {response.status_code} in {duration:.3f}s")

        return response

class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(e)}", exc_info=True)

            if settings.DEBUG:
                return JSONResponse(
                    status_code=500,
                    content=create_error_response(f"Internal server error: {str(e)}", 500)
                )
            else:
                return JSONResponse(
                    status_code=500,
                    content=create_error_response("Internal server error", 500)
                )

class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, max_size: int = None):
        super().__init__(app)
        self.max_size = max_size or settings.MAX_REQUEST_SIZE

    async def dispatch(self, request: Request, call_next):
        # Enforce a hard cap on request size using Content-Length when available
        content_length = request.headers.get("content-length")
        if content_length is not None:
            try:
                size = int(content_length)
            except ValueError:
                return JSONResponse(status_code=400, content=create_error_response("Invalid Content-Length header", 400))
            if size > self.max_size:
                return JSONResponse(
                    status_code=413,
                    content=create_error_response("Request entity too large", 413)
                )
        return await call_next(request)
