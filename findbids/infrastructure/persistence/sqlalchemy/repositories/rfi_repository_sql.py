from collections import defaultdict
from typing import List, Optional
from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from .....db.models import Rfi, RfiMessage, RfiAttachment
from .....application.ports.rfi_repo import (
    RfiRepository,
    RfiDto,
    RfiMessageDto,
    RfiAttachmentDto,
)


class SqlRfiRepository(RfiRepository):
    def __init__(self, session: Session):
        self.session = session

    def _rfi_to_dto(self, r: Rfi) -> RfiDto:
        return RfiDto(
            id=r.id,
            rfp_id=r.rfp_id,
            email=r.email,
            message=r.message,
            status=r.status,
            created_at=r.created_at,
        )

    def _attachment_to_dto(self, a: RfiAttachment, rfi_id: Optional[int] = None) -> RfiAttachmentDto:
        return RfiAttachmentDto(
            id=a.id,
            message_id=a.message_id,
            filename=a.filename,
            file_url=a.file_url,
            file_size=a.file_size,
            mime_type=a.mime_type,
            created_at=a.created_at,
            rfi_id=rfi_id,
        )

    def _message_to_dto(self, m: RfiMessage, attachments: List[RfiAttachmentDto] = None) -> RfiMessageDto:
        return RfiMessageDto(
            id=m.id,
            rfi_id=m.rfi_id,
            sender_id=m.sender_id,
            message=m.message,
            created_at=m.created_at,
            attachments=attachments or [],
        )

    def get(self, rfi_id: int) -> Optional[RfiDto]:
        r = self.session.get(Rfi, rfi_id)
        return self._rfi_to_dto(r) if r else None

    def create(self, rfp_id: int, email: str, message: str) -> RfiDto:
        r = Rfi(rfp_id=rfp_id, email=email, message=message, status="pending")
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return self._rfi_to_dto(r)

    def list_for_rfp(self, rfp_id: int) -> List[RfiDto]:
        rows = self.session.exec(
            select(Rfi).where(Rfi.rfp_id == rfp_id).order_by(Rfi.created_at.desc(), Rfi.id.desc())
        ).all()
        return [self._rfi_to_dto(r) for r in rows]

    def list_for_rfps(self, rfp_ids: List[int]) -> List[RfiDto]:
        if not rfp_ids:
            return []
        rows = self.session.exec(
            select(Rfi).where(Rfi.rfp_id.in_(rfp_ids)).order_by(Rfi.created_at.desc(), Rfi.id.desc())
        ).all()
        return [self._rfi_to_dto(r) for r in rows]

    def list_for_email(self, email: str) -> List[RfiDto]:
        rows = self.session.exec(
            select(Rfi)
            .where(func.lower(Rfi.email) == email.strip().lower())
            .order_by(Rfi.created_at.desc(), Rfi.id.desc())
        ).all()
        return [self._rfi_to_dto(r) for r in rows]

    def set_status(self, rfi_id: int, status: str) -> Optional[RfiDto]:
        r = self.session.get(Rfi, rfi_id)
        if not r:
            return None
        r.status = status
        self.session.add(r)
        self.session.commit()
        self.session.refresh(r)
        return self._rfi_to_dto(r)

    def set_status_bulk(self, rfi_ids: List[int], status: str) -> int:
        if not rfi_ids:
            return 0
        result = self.session.exec(
            update(Rfi)
            .where(Rfi.id.in_(rfi_ids))
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        self.session.commit()
        self.session.expire_all()
        return result.rowcount or 0

    def delete(self, rfi_id: int) -> None:
        message_ids = select(RfiMessage.id).where(RfiMessage.rfi_id == rfi_id)
        for stmt in (
            delete(RfiAttachment).where(RfiAttachment.message_id.in_(message_ids)),
            delete(RfiMessage).where(RfiMessage.rfi_id == rfi_id),
            delete(Rfi).where(Rfi.id == rfi_id),
        ):
            self.session.exec(stmt.execution_options(synchronize_session=False))
        self.session.commit()
        self.session.expire_all()

    def list_messages(self, rfi_id: int) -> List[RfiMessageDto]:
        messages = self.session.exec(
            select(RfiMessage)
            .where(RfiMessage.rfi_id == rfi_id)
            .order_by(RfiMessage.created_at.asc(), RfiMessage.id.asc())
        ).all()
        if not messages:
            return []
        attachments = self.session.exec(
            select(RfiAttachment)
            .where(RfiAttachment.message_id.in_([m.id for m in messages]))
            .order_by(RfiAttachment.id.asc())
        ).all()
        by_message = defaultdict(list)
        for a in attachments:
            by_message[a.message_id].append(self._attachment_to_dto(a, rfi_id))
        return [self._message_to_dto(m, by_message.get(m.id)) for m in messages]

    def create_message(self, rfi_id: int, sender_id: int, message: str) -> RfiMessageDto:
        m = RfiMessage(rfi_id=rfi_id, sender_id=sender_id, message=message)
        self.session.add(m)
        self.session.commit()
        self.session.refresh(m)
        return self._message_to_dto(m)

    def add_attachment(self, message_id: int, filename: str, file_url: str, file_size: int, mime_type: str) -> RfiAttachmentDto:
        a = RfiAttachment(
            message_id=message_id,
            filename=filename,
            file_url=file_url,
            file_size=file_size,
            mime_type=mime_type,
        )
        self.session.add(a)
        self.session.commit()
        self.session.refresh(a)
        return self._attachment_to_dto(a)

    def get_attachment(self, attachment_id: int) -> Optional[RfiAttachmentDto]:
        row = self.session.exec(
            select(RfiAttachment, RfiMessage.rfi_id)
            .join(RfiMessage, RfiMessage.id == RfiAttachment.message_id)
            .where(RfiAttachment.id == attachment_id)
        ).first()
        if not row:
            return None
        attachment, rfi_id = row
        return self._attachment_to_dto(attachment, rfi_id)
