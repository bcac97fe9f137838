from dataclasses import dataclass, field
from typing import List, Optional
from datetime import datetime


@dataclass
class RfiDto:
    id: int
    rfp_id: Optional[int]
    email: str
    message: str
    status: str
    created_at: datetime


@dataclass
class RfiAttachmentDto:
    id: int
    message_id: int
    filename: str
    file_url: str
    file_size: int
    mime_type: str
    created_at: datetime
    rfi_id: Optional[int] = None


@dataclass
class RfiMessageDto:
    id: int
    rfi_id: int
    sender_id: int
    message: str
    created_at: datetime
    attachments: List[RfiAttachmentDto] = field(default_factory=list)


class RfiRepository:
    def get(self, rfi_id: int) -> Optional[RfiDto]:
        ...

    def create(self, rfp_id: int, email: str, message: str) -> RfiDto:
        ...

    def list_for_rfp(self, rfp_id: int) -> List[RfiDto]:
        ...

    def list_for_rfps(self, rfp_ids: List[int]) -> List[RfiDto]:
        ...

    def list_for_email(self, email: str) -> List[RfiDto]:
        ...

    def set_status(self, rfi_id: int, status: str) -> Optional[RfiDto]:
        ...

    def set_status_bulk(self, rfi_ids: List[int], status: str) -> int:
        ...

    def delete(self, rfi_id: int) -> None:
        """Hard delete; messages and their attachments go with it."""
        ...

    def list_messages(self, rfi_id: int) -> List[RfiMessageDto]:
        ...

    def create_message(self, rfi_id: int, sender_id: int, message: str) -> RfiMessageDto:
        ...

    def add_attachment(self, message_id: int, filename: str, file_url: str, file_size: int, mime_type: str) -> RfiAttachmentDto:
        ...

    def get_attachment(self, attachment_id: int) -> Optional[RfiAttachmentDto]:
        ...
