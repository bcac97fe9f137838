import os
from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from starlette.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from sqlalchemy import text
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import settings
from .utils import utcnow
from .database import create_db_and_tables, engine
from .middleware import RateLimitMiddleware, SecurityMiddleware, LoggingMiddleware, ErrorHandlingMiddleware, RequestSizeLimitMiddleware
from .exceptions import http_exception_handler, validation_exception_handler
from .infrastructure.realtime.factory import build_notification_hub
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .routers import auth_router, account_router, employees_router, rfps_router, rfis_router, notifications_router, analytics_router, ws_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

if not settings.secret_configured:
    logger.warning("JWT_SECRET_KEY is not configured; logins will fail until it is set")


def build_rate_limiter():
    if settings.RATE_LIMIT_BACKEND.lower() == "redis":
        from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
        return RedisRateLimiter(settings.REDIS_URL)
    return InMemoryRateLimiter()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    app.state.db_init_error = None
    try:
        create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        app.state.db_init_error = str(e)
        logger.exception("Database initialization failed")

    await app.state.notification_hub.start()
    yield
    # Shutdown
    await app.state.notification_hub.stop()
    logger.info(f"Shutting down {settings.APP_NAME}...")

# Initialize FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url=("/docs" if settings.DOCS_ENABLED else None),
    redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
    openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
)

# One hub per process, shared by the WebSocket endpoint and notification writers
app.state.notification_hub = build_notification_hub(settings)

# Add custom exception handlers
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

# Add middleware
app.add_middleware(ErrorHandlingMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
app.add_middleware(
    RateLimitMiddleware,
    limiter=build_rate_limiter(),
    rate_limit=settings.RATE_LIMIT_PER_MINUTE,
    enabled=settings.RATE_LIMIT_ENABLED,
)

# GZip compression
app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount uploaded RFI attachments
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include all routers
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(employees_router.router)
app.include_router(rfps_router.router)
app.include_router(rfis_router.router)
app.include_router(notifications_router.router)
app.include_router(analytics_router.router)
app.include_router(ws_router.router)

# Health check endpoint
@app.get("/health")
def health_check():
    db_ok = getattr(app.state, "db_init_ok", True)
    db_error = getattr(app.state, "db_init_error", None)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        db_ok = False
        db_error = str(e) if settings.DEBUG else "unavailable"
    return {
        "status": "healthy" if db_ok else "degraded",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utcnow().isoformat(),
        "database": {
            "ok": db_ok,
            "error": db_error
        },
        "realtime": {
            "backend": settings.NOTIFICATION_BACKEND,
            "connections": app.state.notification_hub.connection_count()
        },
        "auth": {
            "secret_key_configured": settings.secret_configured,
            "jwt_algorithm": settings.ALGORITHM,
            "session_max_age_minutes": settings.SESSION_MAX_AGE_MINUTES
        }
    }


# ------------------------
# Run with correct PORT in local/production
# ------------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "findbids.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower()
    )
