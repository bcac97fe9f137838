import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...config import settings
from ...exceptions import ValidationError
from ...utils import sanitize_filename
from ..ports.rfi_repo import RfiRepository, RfiMessageDto, RfiAttachmentDto
from ..ports.storage_repo import StorageRepository
from ..ports.user_repo import UserRepository, UserDto
from .notification_service import NotificationService, RFI_RESPONSE
from .rfi_access import RfiAccess, RfiAccessPolicy, RfiRole, RequestContext

logger = logging.getLogger(__name__)


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ThreadMessage:
    message: RfiMessageDto
    sender: Optional[UserDto]

    @property
    def attachments(self) -> List[RfiAttachmentDto]:
        return self.message.attachments


@dataclass
class RfiConversationService:
    access: RfiAccessPolicy
    rfi_repo: RfiRepository
    user_repo: UserRepository
    storage: StorageRepository
    notifications: NotificationService
    allowed_types: List[str] = field(default_factory=lambda: list(settings.ALLOWED_ATTACHMENT_TYPES))
    max_attachment_size: int = settings.MAX_ATTACHMENT_SIZE
    max_attachments: int = settings.MAX_ATTACHMENTS_PER_MESSAGE

    def list_messages(self, user: UserDto, rfi_id: int, context: Optional[RequestContext] = None) -> List[ThreadMessage]:
        self.access.require_participant(user, rfi_id, "rfi_messages.list", context)
        messages = self.rfi_repo.list_messages(rfi_id)
        senders: Dict[int, Optional[UserDto]] = {}
        for m in messages:
            if m.sender_id not in senders:
                senders[m.sender_id] = self.user_repo.get_by_id(m.sender_id)
        return [ThreadMessage(m, senders.get(m.sender_id)) for m in messages]

    async def post_message(self, user: UserDto, rfi_id: int, text: Optional[str], files: Optional[List[IncomingFile]] = None, context: Optional[RequestContext] = None) -> ThreadMessage:
        access = self.access.require_participant(user, rfi_id, "rfi_messages.create", context)

        files = files or []
        body = (text or "").strip()
        if not body and not files:
            raise ValidationError("Message text or at least one attachment is required")
        if len(files) > self.max_attachments:
            raise ValidationError(f"At most {self.max_attachments} attachments are allowed per message")

        message = self.rfi_repo.create_message(rfi_id, user.id, body)
        for incoming in files:
            attachment = self._store_attachment(user, message.id, incoming)
            if attachment is not None:
                message.attachments.append(attachment)

        if access.role == RfiRole.OWNER and access.rfi.status != "responded":
            self.rfi_repo.set_status(rfi_id, "responded")

        await self._notify_other_party(user, access)
        return ThreadMessage(message, user)

    def _store_attachment(self, user: UserDto, message_id: int, incoming: IncomingFile) -> Optional[RfiAttachmentDto]:
        if incoming.content_type not in self.allowed_types:
            logger.warning(f"Skipping attachment with disallowed type {incoming.content_type}")
            return None
        if incoming.size > self.max_attachment_size:
            logger.warning(f"Skipping attachment of {incoming.size} bytes, limit is {self.max_attachment_size}")
            return None

        filename = sanitize_filename(incoming.filename)
        try:
            file_url = self.storage.upload(incoming.data, filename, incoming.content_type, user.id)
        except Exception as e:
            logger.warning(f"Attachment upload failed for {filename}: {e}")
            return None
        return self.rfi_repo.add_attachment(message_id, filename, file_url, incoming.size, incoming.content_type)

    async def _notify_other_party(self, sender: UserDto, access: RfiAccess) -> None:
        if access.role == RfiRole.SUBMITTER:
            recipient_id = access.rfp.organization_id
        else:
            recipient = self.user_repo.get_by_email(access.rfi.email)
            recipient_id = recipient.id if recipient else None

        if recipient_id is None or recipient_id == sender.id:
            return

        await self.notifications.create(
            user_id=recipient_id,
            type=RFI_RESPONSE,
            title="New RFI message",
            message=f"{sender.company_name} replied on \"{access.rfp.title}\"",
            related_id=access.rfi.id,
            related_type="rfi",
        )
