import re
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from .config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


# =========================
# Time
# =========================
def utcnow() -> datetime:
    """Timezone-aware current UTC time; every stored timestamp goes through here"""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive values are read as UTC (SQLite drops the offset on storage)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =========================
# Passwords
# =========================
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # Stored value is not a recognised hash
        return False


# =========================
# Session token handling
# =========================
def create_session_token(user_id: int, session_id: str, expires_at: Optional[datetime] = None) -> str:
    """Sign a session token that points at a server-side session row"""
    expire = expires_at or utcnow() + timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES)
    to_encode = {"sub": str(user_id), "sid": session_id, "exp": expire, "type": "session"}

    # Ensure SECRET_KEY is properly set
    if not settings.secret_configured:
        raise ValueError("SECRET_KEY not properly configured")

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str):
    """Decode and verify a session token; None when invalid or expired"""
    if not token or not settings.secret_configured:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != "session" or not payload.get("sid") or not payload.get("sub"):
        return None
    return payload


# =========================
# Uploads
# =========================
def sanitize_filename(filename: str) -> str:
    """Keep only [A-Za-z0-9._-]; everything else becomes an underscore."""
    if not filename:
        return "file"
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)
