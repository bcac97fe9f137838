from datetime import datetime, timedelta, timezone

import jwt

from findbids.config import settings
from findbids.logging_utils import mask_email, sanitize_for_logging
from findbids.utils import (
    sanitize_filename, create_session_token, decode_session_token, hash_password, verify_password,
)


def test_sanitize_filename_keeps_safe_characters_only():
    assert sanitize_filename("Site Plan (rev 2).pdf") == "Site_Plan__rev_2_.pdf"
    assert sanitize_filename("../../etc/passwd") == ".._.._etc_passwd"
    assert sanitize_filename("ok-name_1.0.txt") == "ok-name_1.0.txt"
    assert sanitize_filename("") == "file"


def test_session_token_round_trip_and_expiry():
    token = create_session_token(5, "sess-1")
    payload = decode_session_token(token)
    assert payload["sub"] == "5"
    assert payload["sid"] == "sess-1"

    expired = create_session_token(5, "sess-1", datetime.now(timezone.utc) - timedelta(minutes=1))
    assert decode_session_token(expired) is None


def test_token_signed_with_other_key_rejected():
    forged = jwt.encode({"sub": "1", "sid": "x", "type": "session"}, "another-key", algorithm=settings.ALGORITHM)
    assert decode_session_token(forged) is None


def test_password_hashing():
    hashed = hash_password("s3cret-pass")
    assert hashed.startswith("$2")
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("s3cret-pass", "not-a-hash")


def test_log_redaction():
    cleaned = sanitize_for_logging({
        "password": "hunter2",
        "email": "john.doe@example.com",
        "nested": {"session_token": "abc", "count": 3},
    })
    assert cleaned["password"] == "[REDACTED]"
    assert cleaned["email"] == "j***@example.com"
    assert cleaned["nested"] == {"session_token": "[REDACTED]", "count": 3}
    assert mask_email("bad") == "[invalid_email]"
