from dataclasses import dataclass
from typing import List, Optional

from ...exceptions import ForbiddenError, NotFoundError, ValidationError
from ..ports.rfi_repo import RfiRepository, RfiDto
from ..ports.rfp_repo import RfpRepository, RfpDto
from ..ports.user_repo import UserRepository, UserDto
from .notification_service import NotificationService, RFI_RECEIVED, RFI_STATUS
from .rfi_access import RfiAccessPolicy, RequestContext

VALID_STATUSES = ("pending", "responded")


@dataclass
class RfiView:
    rfi: RfiDto
    rfp: Optional[RfpDto] = None
    submitter_company: Optional[str] = None


@dataclass
class RfiService:
    rfi_repo: RfiRepository
    rfp_repo: RfpRepository
    user_repo: UserRepository
    access: RfiAccessPolicy
    notifications: NotificationService

    def _require_owned_rfp(self, user: UserDto, rfp_id: int) -> RfpDto:
        rfp = self.rfp_repo.get(rfp_id)
        if not rfp:
            raise NotFoundError("RFP not found")
        if rfp.organization_id != user.id:
            raise ForbiddenError("Unauthorized")
        return rfp

    def _check_status(self, status: str) -> None:
        if status not in VALID_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {list(VALID_STATUSES)}")

    async def submit(self, user: UserDto, rfp_id: int, message: str) -> RfiDto:
        rfp = self.rfp_repo.get(rfp_id)
        if not rfp:
            raise NotFoundError("RFP not found")
        body = (message or "").strip()
        if not body:
            raise ValidationError("Message is required")

        rfi = self.rfi_repo.create(rfp_id, user.email, body)

        if rfp.organization_id is not None and rfp.organization_id != user.id:
            await self.notifications.create(
                user_id=rfp.organization_id,
                type=RFI_RECEIVED,
                title="New RFI received",
                message=f"{user.company_name} submitted an RFI on \"{rfp.title}\"",
                related_id=rfi.id,
                related_type="rfi",
            )
        return rfi

    def list_for_rfp(self, user: UserDto, rfp_id: int) -> List[RfiView]:
        rfp = self._require_owned_rfp(user, rfp_id)
        views = []
        for rfi in self.rfi_repo.list_for_rfp(rfp_id):
            submitter = self.user_repo.get_by_email(rfi.email)
            views.append(RfiView(rfi, rfp, submitter.company_name if submitter else "N/A"))
        return views

    def list_mine(self, user: UserDto) -> List[RfiView]:
        return [RfiView(rfi, self.rfp_repo.get(rfi.rfp_id)) for rfi in self.rfi_repo.list_for_email(user.email)]

    def list_received(self, user: UserDto) -> List[RfiView]:
        rfps = {rfp.id: rfp for rfp in self.rfp_repo.list_for_owner(user.id)}
        views = []
        for rfi in self.rfi_repo.list_for_rfps(list(rfps)):
            submitter = self.user_repo.get_by_email(rfi.email)
            views.append(RfiView(rfi, rfps.get(rfi.rfp_id), submitter.company_name if submitter else "N/A"))
        return views

    async def update_status(self, user: UserDto, rfp_id: int, rfi_id: int, status: str) -> RfiDto:
        self._check_status(status)
        rfp = self._require_owned_rfp(user, rfp_id)
        rfi = self.rfi_repo.get(rfi_id)
        if not rfi or rfi.rfp_id != rfp_id:
            raise NotFoundError("RFI not found")

        updated = self.rfi_repo.set_status(rfi_id, status)
        await self._notify_status(user, rfp, rfi, status)
        return updated

    async def bulk_update_status(self, user: UserDto, status: str, rfi_ids: Optional[List[int]] = None) -> int:
        """Set the status on the caller's RFIs; submitters hear about RFIs whose status actually changed."""
        self._check_status(status)
        rfps = {rfp.id: rfp for rfp in self.rfp_repo.list_for_owner(user.id)}
        targets = self.rfi_repo.list_for_rfps(list(rfps))
        if rfi_ids is not None:
            requested = set(rfi_ids)
            targets = [rfi for rfi in targets if rfi.id in requested]
        changed = [rfi for rfi in targets if rfi.status != status]

        updated = self.rfi_repo.set_status_bulk([rfi.id for rfi in targets], status)
        for rfi in changed:
            await self._notify_status(user, rfps[rfi.rfp_id], rfi, status)
        return updated

    async def _notify_status(self, owner: UserDto, rfp: RfpDto, rfi: RfiDto, status: str) -> None:
        submitter = self.user_repo.get_by_email(rfi.email)
        if not submitter or submitter.id == owner.id:
            return
        await self.notifications.create(
            user_id=submitter.id,
            type=RFI_STATUS,
            title="RFI status updated",
            message=f"Your RFI on \"{rfp.title}\" is now {status}",
            related_id=rfi.id,
            related_type="rfi",
        )

    def delete(self, user: UserDto, rfi_id: int, context: Optional[RequestContext] = None) -> None:
        self.access.require_participant(user, rfi_id, "rfi.delete", context)
        self.rfi_repo.delete(rfi_id)

    def attachment_download_url(self, user: UserDto, attachment_id: int, context: Optional[RequestContext] = None) -> str:
        attachment = self.rfi_repo.get_attachment(attachment_id)
        if not attachment:
            raise NotFoundError("Attachment not found")
        self.access.require_participant(user, attachment.rfi_id, "rfi_attachment.download", context)
        return attachment.file_url
