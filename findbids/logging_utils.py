"""Helpers for keeping credentials and personal data out of log lines."""
from typing import Any

SENSITIVE_FIELDS = (
    "password", "secret", "token", "key", "authorization",
    "cookie", "session", "credential", "csrf", "ssn", "creditcard", "cvv",
)
MASKABLE_FIELDS = ("email", "phone", "telephone", "cell")
MAX_DEPTH = 6


def mask_email(email: str) -> str:
    """john.doe@example.com -> j***@example.com"""
    if not email or not isinstance(email, str) or "@" not in email:
        return "[invalid_email]"
    local, _, domain = email.partition("@")
    if not local or not domain:
        return "[invalid_email]"
    return f"{local[0]}***@{domain}"


def _mask_value(value: str) -> str:
    if "@" in value:
        return mask_email(value)
    if len(value) <= 2:
        return "[redacted]"
    return value[:2] + "*" * max(3, len(value) - 2)


def sanitize_for_logging(obj: Any, depth: int = 0) -> Any:
    if depth > MAX_DEPTH:
        return "[max_depth]"
    if obj is None or isinstance(obj, (bool, int, float)):
        return obj
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (list, tuple, set)):
        return [sanitize_for_logging(item, depth + 1) for item in obj]
    if isinstance(obj, dict):
        sanitized = {}
        for key, value in obj.items():
            lower_key = str(key).lower()
            if any(field in lower_key for field in SENSITIVE_FIELDS):
                sanitized[key] = "[REDACTED]"
            elif any(field in lower_key for field in MASKABLE_FIELDS) and isinstance(value, str):
                sanitized[key] = _mask_value(value)
            else:
                sanitized[key] = sanitize_for_logging(value, depth + 1)
        return sanitized
    if isinstance(obj, BaseException):
        return {"name": type(obj).__name__, "message": str(obj)}
    return str(obj)


def user_log_id(user_id, email: str = None) -> str:
    if user_id is None:
        return "[no_user]"
    if email:
        return f"{user_id}({mask_email(email)})"
    return str(user_id)
