from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest
from fastapi import HTTPException

from findbids.application.ports.rfi_repo import RfiDto, RfiMessageDto, RfiAttachmentDto
from findbids.application.ports.rfp_repo import RfpDto
from findbids.application.ports.user_repo import UserDto
from findbids.application.services.rfi_access import RfiAccessPolicy, RfiRole, RequestContext
from findbids.application.services.rfi_conversation_service import RfiConversationService, IncomingFile
from findbids.application.services.rfi_service import RfiService


def make_user(id: int, email: str, company: str = "Co") -> UserDto:
    return UserDto(id=id, email=email, company_name=company, status="active", created_at=datetime.now(timezone.utc))


def make_rfp(id: int, owner_id: Optional[int]) -> RfpDto:
    now = datetime.now(timezone.utc)
    return RfpDto(
        id=id, title=f"RFP {id}", description="d", walkthrough_date=now, rfi_date=now,
        deadline=now, job_location="here", organization_id=owner_id,
    )


class FakeRfpRepo:
    def __init__(self, rfps: List[RfpDto]):
        self.rfps = {r.id: r for r in rfps}

    def get(self, rfp_id):
        return self.rfps.get(rfp_id)

    def list_for_owner(self, owner_id, featured_only=False):
        return [r for r in self.rfps.values() if r.organization_id == owner_id]


class FakeRfiRepo:
    def __init__(self):
        self.rfis: Dict[int, RfiDto] = {}
        self.messages: List[RfiMessageDto] = []
        self.attachments: List[RfiAttachmentDto] = []
        self.deleted: List[int] = []
        self._id = 1

    def _next(self) -> int:
        self._id += 1
        return self._id

    def add_rfi(self, rfp_id, email, status="pending") -> RfiDto:
        rfi = RfiDto(id=self._next(), rfp_id=rfp_id, email=email, message="q", status=status, created_at=datetime.now(timezone.utc))
        self.rfis[rfi.id] = rfi
        return rfi

    def get(self, rfi_id):
        return self.rfis.get(rfi_id)

    def create(self, rfp_id, email, message):
        rfi = self.add_rfi(rfp_id, email)
        rfi.message = message
        return rfi

    def list_for_rfp(self, rfp_id):
        return [r for r in self.rfis.values() if r.rfp_id == rfp_id]

    def list_for_rfps(self, rfp_ids):
        return [r for r in self.rfis.values() if r.rfp_id in rfp_ids]

    def list_for_email(self, email):
        return [r for r in self.rfis.values() if r.email == email]

    def set_status(self, rfi_id, status):
        self.rfis[rfi_id].status = status
        return self.rfis[rfi_id]

    def set_status_bulk(self, rfi_ids, status):
        for rfi_id in rfi_ids:
            self.rfis[rfi_id].status = status
        return len(rfi_ids)

    def delete(self, rfi_id):
        self.deleted.append(rfi_id)
        self.rfis.pop(rfi_id, None)

    def list_messages(self, rfi_id):
        return [m for m in self.messages if m.rfi_id == rfi_id]

    def create_message(self, rfi_id, sender_id, message):
        m = RfiMessageDto(id=self._next(), rfi_id=rfi_id, sender_id=sender_id, message=message, created_at=datetime.now(timezone.utc))
        self.messages.append(m)
        return m

    def add_attachment(self, message_id, filename, file_url, file_size, mime_type):
        a = RfiAttachmentDto(self._next(), message_id, filename, file_url, file_size, mime_type, datetime.now(timezone.utc))
        self.attachments.append(a)
        return a

    def get_attachment(self, attachment_id):
        return next((a for a in self.attachments if a.id == attachment_id), None)


class FakeUserRepo:
    def __init__(self, users: List[UserDto]):
        self.users = users

    def get_by_id(self, user_id):
        return next((u for u in self.users if u.id == user_id), None)

    def get_by_email(self, email):
        return next((u for u in self.users if u.email.lower() == email.lower()), None)


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    async def create(self, user_id, type, title, message, related_id=None, related_type=None):
        self.sent.append((user_id, type, related_id))


class FakeStorage:
    def __init__(self, fail_on: str = None):
        self.fail_on = fail_on
        self.uploaded = []

    def upload(self, data, filename, content_type, owner_id):
        if filename == self.fail_on:
            raise IOError("disk full")
        self.uploaded.append(filename)
        return f"http://files/{owner_id}/{filename}"


class FakeAudit:
    def __init__(self):
        self.entries = []

    def log(self, action, resource, user_id=None, ip_address=None, success=True, details=None):
        self.entries.append({"action": action, "resource": resource, "user_id": user_id, "success": success, "details": details})


OWNER = make_user(1, "owner@org.com", "Owner Org")
SUBMITTER = make_user(2, "Sub@Contractor.com", "Sub Co")
STRANGER = make_user(3, "stranger@else.com", "Else")


@pytest.fixture
def world():
    rfps = FakeRfpRepo([make_rfp(10, OWNER.id), make_rfp(11, STRANGER.id)])
    rfis = FakeRfiRepo()
    users = FakeUserRepo([OWNER, SUBMITTER, STRANGER])
    audit = FakeAudit()
    access = RfiAccessPolicy(rfis, rfps, audit)
    notifications = RecordingNotifications()
    storage = FakeStorage()
    conversation = RfiConversationService(access, rfis, users, storage, notifications)
    service = RfiService(rfis, rfps, users, access, notifications)
    return type("World", (), dict(
        rfps=rfps, rfis=rfis, users=users, audit=audit, access=access,
        notifications=notifications, storage=storage, conversation=conversation, service=service,
    ))


# -- access policy -----------------------------------------------------------

def test_submitter_matched_case_insensitively(world):
    rfi = world.rfis.add_rfi(10, "sub@contractor.COM")
    assert world.access.resolve(SUBMITTER, rfi.id).role == RfiRole.SUBMITTER


def test_owner_and_stranger_roles(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    assert world.access.resolve(OWNER, rfi.id).role == RfiRole.OWNER
    assert world.access.resolve(STRANGER, rfi.id).role == RfiRole.NONE


def test_submitter_wins_when_also_owner(world):
    rfi = world.rfis.add_rfi(10, OWNER.email)
    assert world.access.resolve(OWNER, rfi.id).role == RfiRole.SUBMITTER


def test_missing_rfp_denies_even_the_submitter(world):
    rfi = world.rfis.add_rfi(999, SUBMITTER.email)
    assert world.access.resolve(SUBMITTER, rfi.id).role == RfiRole.NONE


def test_missing_rfi_is_not_found(world):
    with pytest.raises(HTTPException) as exc:
        world.access.resolve(OWNER, 12345)
    assert exc.value.status_code == 404


def test_denied_access_is_audited_with_generic_message(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    ctx = RequestContext(method="GET", path=f"/api/rfis/{rfi.id}/messages", ip_address="10.0.0.1", user_agent="pytest")
    with pytest.raises(HTTPException) as exc:
        world.access.require_participant(STRANGER, rfi.id, "rfi_messages.list", ctx)
    assert exc.value.status_code == 403
    assert exc.value.detail == "Unauthorized"
    entry = world.audit.entries[-1]
    assert entry["success"] is False
    assert entry["user_id"] == STRANGER.id
    assert entry["details"]["path"] == ctx.path


# -- conversation ------------------------------------------------------------

@pytest.mark.asyncio
async def test_owner_reply_marks_responded_and_notifies_submitter(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    out = await world.conversation.post_message(OWNER, rfi.id, "Next Tuesday")
    assert out.message.message == "Next Tuesday"
    assert world.rfis.get(rfi.id).status == "responded"
    assert world.notifications.sent == [(SUBMITTER.id, "rfi_response", rfi.id)]


@pytest.mark.asyncio
async def test_submitter_message_keeps_status_and_notifies_owner(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    await world.conversation.post_message(SUBMITTER, rfi.id, "  Any update?  ")
    assert world.rfis.get(rfi.id).status == "pending"
    assert world.rfis.messages[-1].message == "Any update?"
    assert world.notifications.sent == [(OWNER.id, "rfi_response", rfi.id)]


@pytest.mark.asyncio
async def test_no_notification_when_other_party_is_sender(world):
    rfi = world.rfis.add_rfi(10, OWNER.email)
    await world.conversation.post_message(OWNER, rfi.id, "note to self")
    assert world.notifications.sent == []


@pytest.mark.asyncio
async def test_owner_reply_without_registered_submitter_sends_nothing(world):
    rfi = world.rfis.add_rfi(10, "ghost@nowhere.com")
    await world.conversation.post_message(OWNER, rfi.id, "hello")
    assert world.notifications.sent == []


@pytest.mark.asyncio
async def test_blank_message_without_files_is_rejected(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    with pytest.raises(HTTPException) as exc:
        await world.conversation.post_message(SUBMITTER, rfi.id, "   ", [])
    assert exc.value.status_code == 400
    assert world.rfis.messages == []


@pytest.mark.asyncio
async def test_attachment_only_message_is_accepted(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    out = await world.conversation.post_message(
        SUBMITTER, rfi.id, None, [IncomingFile("plan set.pdf", "application/pdf", b"%PDF")]
    )
    assert out.message.message == ""
    assert [a.filename for a in out.attachments] == ["plan_set.pdf"]


@pytest.mark.asyncio
async def test_bad_files_are_skipped(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    world.conversation.max_attachment_size = 10
    world.storage.fail_on = "broken.png"
    files = [
        IncomingFile("ok.txt", "text/plain", b"fine"),
        IncomingFile("run.exe", "application/x-msdownload", b"MZ"),
        IncomingFile("huge.pdf", "application/pdf", b"x" * 11),
        IncomingFile("broken.png", "image/png", b"png"),
    ]
    out = await world.conversation.post_message(SUBMITTER, rfi.id, "see attached", files)
    assert [a.filename for a in out.attachments] == ["ok.txt"]


@pytest.mark.asyncio
async def test_too_many_files_rejected(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    files = [IncomingFile(f"f{i}.txt", "text/plain", b"x") for i in range(6)]
    with pytest.raises(HTTPException) as exc:
        await world.conversation.post_message(SUBMITTER, rfi.id, "many", files)
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_stranger_cannot_post(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    with pytest.raises(HTTPException) as exc:
        await world.conversation.post_message(STRANGER, rfi.id, "hi")
    assert exc.value.status_code == 403
    assert world.rfis.messages == []


def test_list_messages_includes_senders(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    world.rfis.create_message(rfi.id, SUBMITTER.id, "first")
    world.rfis.create_message(rfi.id, OWNER.id, "second")
    thread = world.conversation.list_messages(OWNER, rfi.id)
    assert [(m.message.message, m.sender.company_name) for m in thread] == [("first", "Sub Co"), ("second", "Owner Org")]


# -- RFI service -------------------------------------------------------------

@pytest.mark.asyncio
async def test_submit_notifies_owner(world):
    rfi = await world.service.submit(SUBMITTER, 10, "When is walkthrough?")
    assert rfi.email == SUBMITTER.email
    assert rfi.status == "pending"
    assert world.notifications.sent == [(OWNER.id, "rfi_received", rfi.id)]


@pytest.mark.asyncio
async def test_submit_on_missing_rfp(world):
    with pytest.raises(HTTPException) as exc:
        await world.service.submit(SUBMITTER, 404, "hi")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_bulk_status_only_touches_callers_rfis(world):
    mine = world.rfis.add_rfi(10, SUBMITTER.email)
    theirs = world.rfis.add_rfi(11, SUBMITTER.email)
    updated = await world.service.bulk_update_status(OWNER, "responded", [mine.id, theirs.id])
    assert updated == 1
    assert world.rfis.get(mine.id).status == "responded"
    assert world.rfis.get(theirs.id).status == "pending"


@pytest.mark.asyncio
async def test_bulk_status_rejects_unknown_status(world):
    with pytest.raises(HTTPException) as exc:
        await world.service.bulk_update_status(OWNER, "archived")
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_update_status_requires_rfp_owner(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    with pytest.raises(HTTPException) as exc:
        await world.service.update_status(STRANGER, 10, rfi.id, "responded")
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_update_status_notifies_submitter(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    out = await world.service.update_status(OWNER, 10, rfi.id, "responded")
    assert out.status == "responded"
    assert world.notifications.sent == [(SUBMITTER.id, "rfi_status", rfi.id)]


def test_delete_requires_participant(world):
    rfi = world.rfis.add_rfi(10, SUBMITTER.email)
    with pytest.raises(HTTPException):
        world.service.delete(STRANGER, rfi.id)
    world.service.delete(SUBMITTER, rfi.id)
    assert world.rfis.deleted == [rfi.id]


def test_list_for_rfp_annotates_company(world):
    world.rfis.add_rfi(10, SUBMITTER.email)
    world.rfis.add_rfi(10, "unknown@x.com")
    companies = sorted(v.submitter_company for v in world.service.list_for_rfp(OWNER, 10))
    assert companies == ["N/A", "Sub Co"]


@pytest.mark.asyncio
async def test_bulk_status_notifies_submitters_of_changed_rfis(world):
    pending = world.rfis.add_rfi(10, SUBMITTER.email)
    already = world.rfis.add_rfi(10, SUBMITTER.email, status="responded")
    updated = await world.service.bulk_update_status(OWNER, "responded")
    assert updated == 2
    assert world.notifications.sent == [(SUBMITTER.id, "rfi_status", pending.id)]
    assert already.id not in [related for _, _, related in world.notifications.sent]
