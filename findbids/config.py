#config.py
import os
from pydantic_settings import BaseSettings
from pydantic import Field
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True)
    # Application Settings
    APP_NAME: str = "FindBids API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))
    WORKERS: int = 1

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./findbids.db")

    # Security Settings
    SECRET_KEY: str = Field(default="change-me-in-prod", alias="JWT_SECRET_KEY")
    ALGORITHM: str = "HS256"
    SESSION_COOKIE_NAME: str = "access_token"
    SESSION_MAX_AGE_MINUTES: int = 60 * 24  # 24 hours
    COOKIE_SECURE: bool = False
    BCRYPT_ROUNDS: int = 12

    # CORS Settings (accept comma-separated strings to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")
    CORS_ALLOW_CREDENTIALS: bool = True

    # RFI attachment settings
    UPLOAD_DIR: str = "uploads"
    BASE_URL: str = os.environ.get("BASE_URL", "http://localhost:8000")
    MAX_ATTACHMENT_SIZE: int = 5 * 1024 * 1024  # 5MB
    MAX_ATTACHMENTS_PER_MESSAGE: int = 5
    ALLOWED_ATTACHMENT_TYPES: List[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "image/jpeg",
        "image/jpg",
        "image/png",
        "text/plain",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ]
    # Five attachments at the per-file cap plus form overhead
    MAX_REQUEST_SIZE: int = 26 * 1024 * 1024

    # Middleware settings
    GZIP_MIN_SIZE: int = 500  # bytes

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120
    RATE_LIMIT_BACKEND: str = "memory"  # memory | redis

    # Realtime notifications
    NOTIFICATION_BACKEND: str = "memory"  # memory | redis
    REDIS_URL: str = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    NOTIFICATION_CHANNEL: str = "findbids:notifications"
    NOTIFICATION_RETRY_SECONDS: float = 1.0
    WS_AUTH_TIMEOUT_SECONDS: float = 10.0

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def secret_configured(self) -> bool:
        return bool(self.SECRET_KEY and self.SECRET_KEY != "change-me-in-prod")


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    # Normalize ALLOWED_ORIGINS if provided as comma-separated string env var CORS_ORIGINS
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
