from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...exceptions import ForbiddenError, NotFoundError
from ..ports.audit_logger import AuditLogger
from ..ports.rfi_repo import RfiRepository, RfiDto
from ..ports.rfp_repo import RfpRepository, RfpDto
from ..ports.user_repo import UserDto


class RfiRole(str, Enum):
    SUBMITTER = "submitter"
    OWNER = "owner"
    NONE = "none"


@dataclass
class RfiAccess:
    role: RfiRole
    rfi: RfiDto
    rfp: Optional[RfpDto]

    @property
    def allowed(self) -> bool:
        return self.role != RfiRole.NONE


@dataclass
class RequestContext:
    """Request facts recorded on a denied access."""
    method: str = ""
    path: str = ""
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class RfiAccessPolicy:
    rfi_repo: RfiRepository
    rfp_repo: RfpRepository
    audit: Optional[AuditLogger] = None

    def resolve(self, user: UserDto, rfi_id: int) -> RfiAccess:
        """Work out how ``user`` relates to the RFI. Submitter wins over owner."""
        rfi = self.rfi_repo.get(rfi_id)
        if not rfi:
            raise NotFoundError("RFI not found")

        rfp = self.rfp_repo.get(rfi.rfp_id) if rfi.rfp_id is not None else None
        if not rfp:
            return RfiAccess(RfiRole.NONE, rfi, None)

        if rfi.email and user.email and rfi.email.strip().lower() == user.email.strip().lower():
            return RfiAccess(RfiRole.SUBMITTER, rfi, rfp)
        if rfp.organization_id is not None and rfp.organization_id == user.id:
            return RfiAccess(RfiRole.OWNER, rfi, rfp)
        return RfiAccess(RfiRole.NONE, rfi, rfp)

    def require_participant(self, user: UserDto, rfi_id: int, action: str, context: Optional[RequestContext] = None) -> RfiAccess:
        access = self.resolve(user, rfi_id)
        if access.allowed:
            return access

        if self.audit is not None:
            context = context or RequestContext()
            self.audit.log(
                action=action,
                resource=f"rfi:{rfi_id}",
                user_id=user.id,
                ip_address=context.ip_address,
                success=False,
                details={
                    "reason": "authorization_failure",
                    "method": context.method,
                    "path": context.path,
                    "user_agent": context.user_agent,
                },
            )
        # Same body whichever check failed
        raise ForbiddenError("Unauthorized")
