import json
import logging
from typing import Optional, Dict, Any

from ...application.ports.audit_logger import AuditLogger
from ...logging_utils import sanitize_for_logging
from ...utils import utcnow


class StdAuditLogger(AuditLogger):
    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def log(self, action: str, resource: str, user_id: Optional[int] = None, ip_address: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": utcnow().isoformat(),
            "action": action,
            "resource": resource,
            "user_id": user_id if user_id is not None else "unauthenticated",
            "ip_address": ip_address,
            "success": success,
            "details": sanitize_for_logging(details or {}),
        }
        if success:
            self._logger.info(f"AUDIT: {json.dumps(entry, default=str)}")
        else:
            self._logger.warning(f"AUDIT: {json.dumps(entry, default=str)}")
