import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...exceptions import NotFoundError, ValidationError
from ..ports.audit_logger import AuditLogger
from ..ports.session_repo import SessionRepository
from ..ports.user_repo import UserRepository, UserDto

logger = logging.getLogger(__name__)

# Profile columns a user may change through settings or onboarding
PROFILE_FIELDS = (
    "company_name", "contact", "telephone", "cell", "business_email", "is_minority_owned",
    "minority_group", "trade", "certification_name", "logo", "language",
)


@dataclass
class AccountService:
    user_repo: UserRepository
    session_repo: SessionRepository
    audit: Optional[AuditLogger] = None

    def _audit(self, action: str, user: UserDto, ip_address: Optional[str]) -> None:
        if self.audit:
            self.audit.log(action, "user", user_id=user.id, ip_address=ip_address)

    def _update(self, user: UserDto, fields: Dict[str, Any]) -> UserDto:
        updated = self.user_repo.update_fields(user.id, fields)
        if not updated:
            raise NotFoundError("User not found")
        return updated

    def update_settings(self, user: UserDto, data: Dict[str, Any]) -> UserDto:
        fields = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
        if "company_name" in fields and not (fields["company_name"] or "").strip():
            raise ValidationError("Company name is required")
        if not fields:
            return user
        return self._update(user, fields)

    def complete_onboarding(self, user: UserDto, data: Dict[str, Any]) -> UserDto:
        fields = {k: v for k, v in data.items() if k in PROFILE_FIELDS}
        fields["onboarding_complete"] = True
        updated = self._update(user, fields)
        logger.info(f"User {user.id} completed onboarding")
        return updated

    def deactivate(self, user: UserDto, ip_address: Optional[str] = None) -> UserDto:
        """Mark the account deactivated and revoke every session it holds."""
        updated = self._update(user, {"status": "deactivated"})
        revoked = self.session_repo.delete_for_user(user.id)
        logger.info(f"User {user.id} deactivated, {revoked} session(s) revoked")
        self._audit("account_deactivate", user, ip_address)
        return updated

    def delete_account(self, user: UserDto, ip_address: Optional[str] = None) -> None:
        self.user_repo.delete(user.id)
        logger.info(f"User {user.id} deleted their account")
        self._audit("account_delete", user, ip_address)
