from sqlmodel import select

from findbids.db.models import Rfi, RfiAttachment, RfiMessage


def _setup(client, helpers):
    org = helpers.register(client, "org@builders.com", "Builders Inc")
    contractor = helpers.register(client, "bob@roofing.com", "Bob Roofing")
    stranger = helpers.register(client, "eve@else.com", "Eve Co")
    rfp = helpers.rfp(client, org)
    rfi = helpers.rfi(client, contractor, rfp["id"])
    return org, contractor, stranger, rfp, rfi


def test_non_participants_are_forbidden(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)

    for method, url, kwargs in (
        ("get", f"/api/rfis/{rfi['id']}/messages", {}),
        ("post", f"/api/rfis/{rfi['id']}/messages", {"json": {"message": "hi"}}),
        ("delete", f"/api/rfis/{rfi['id']}", {}),
    ):
        response = getattr(client, method)(url, headers=stranger.headers, **kwargs)
        assert response.status_code == 403
        assert response.json() == {"success": False, "data": None, "error": "Unauthorized"}


def test_unknown_rfi_is_404(client, helpers):
    org = helpers.register(client, "org@builders.com")
    response = client.get("/api/rfis/9999/messages", headers=org.headers)
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_unauthenticated_requests_are_401(client, helpers):
    _setup(client, helpers)
    client.cookies.clear()
    assert client.get("/api/rfis/1/messages").status_code == 401
    assert client.get("/api/user").status_code == 401


def test_empty_message_is_rejected(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    response = client.post(f"/api/rfis/{rfi['id']}/messages", json={"message": "   "}, headers=contractor.headers)
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_submitter_message_keeps_pending_status(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    response = client.post(f"/api/rfis/{rfi['id']}/messages", json={"message": "Also, parking?"}, headers=contractor.headers)
    assert response.status_code == 201
    received = client.get("/api/rfis/received", headers=org.headers).json()
    assert received[0]["status"] == "pending"
    assert received[0]["company_name"] == "Bob Roofing"


def test_multipart_message_skips_bad_attachments(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    files = [
        ("attachment", ("scope of work.pdf", b"%PDF-1.4 test", "application/pdf")),
        ("attachment", ("installer.exe", b"MZ", "application/x-msdownload")),
        ("attachment", ("big.png", b"0" * (5 * 1024 * 1024 + 1), "image/png")),
    ]
    response = client.post(
        f"/api/rfis/{rfi['id']}/messages",
        data={"message": "See attached"},
        files=files,
        headers=contractor.headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert [a["filename"] for a in body["attachments"]] == ["scope_of_work.pdf"]
    assert body["attachments"][0]["file_url"].startswith("http://testserver/uploads/rfi-attachments/")

    download = client.get(
        f"/api/attachments/{body['attachments'][0]['id']}/download",
        headers=org.headers,
        follow_redirects=False,
    )
    assert download.status_code == 307
    assert download.headers["location"] == body["attachments"][0]["file_url"]

    denied = client.get(
        f"/api/attachments/{body['attachments'][0]['id']}/download",
        headers=stranger.headers,
        follow_redirects=False,
    )
    assert denied.status_code == 403


def test_attachment_only_message(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    response = client.post(
        f"/api/rfis/{rfi['id']}/messages",
        files=[("attachment", ("notes.txt", b"bring ladders", "text/plain"))],
        headers=org.headers,
    )
    assert response.status_code == 201, response.text
    assert response.json()["message"] == ""
    assert len(response.json()["attachments"]) == 1


def test_more_than_five_attachments_rejected(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    files = [("attachment", (f"f{i}.txt", b"x", "text/plain")) for i in range(6)]
    response = client.post(f"/api/rfis/{rfi['id']}/messages", files=files, headers=contractor.headers)
    assert response.status_code == 400


def test_delete_rfi_removes_messages_and_attachments(client, helpers, session):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    client.post(
        f"/api/rfis/{rfi['id']}/messages",
        data={"message": "with file"},
        files=[("attachment", ("a.txt", b"a", "text/plain"))],
        headers=contractor.headers,
    )
    response = client.delete(f"/api/rfis/{rfi['id']}", headers=org.headers)
    assert response.status_code == 200

    assert session.exec(select(RfiMessage)).all() == []
    assert session.exec(select(RfiAttachment)).all() == []
    assert client.get(f"/api/rfis/{rfi['id']}/messages", headers=org.headers).status_code == 404


def test_manual_and_bulk_status(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    other_rfp = helpers.rfp(client, stranger, title="Other job")
    other_rfi = helpers.rfi(client, contractor, other_rfp["id"])

    response = client.put(
        f"/api/rfps/{rfp['id']}/rfi/{rfi['id']}/status", json={"status": "responded"}, headers=org.headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "responded"

    wrong_rfp = client.put(
        f"/api/rfps/{rfp['id']}/rfi/{other_rfi['id']}/status", json={"status": "pending"}, headers=org.headers
    )
    assert wrong_rfp.status_code == 404

    bad_status = client.put(
        f"/api/rfps/{rfp['id']}/rfi/{rfi['id']}/status", json={"status": "closed"}, headers=org.headers
    )
    assert bad_status.status_code == 400

    bulk = client.put(
        "/api/rfis/bulk-status", json={"status": "pending", "rfi_ids": [rfi["id"], other_rfi["id"]]}, headers=org.headers
    )
    assert bulk.json()["updated"] == 1

    statuses = {r["id"]: r["status"] for r in client.get("/api/rfis", headers=contractor.headers).json()}
    assert statuses == {rfi["id"]: "pending", other_rfi["id"]: "pending"}

    types = [n["type"] for n in client.get("/api/notifications", headers=contractor.headers).json()]
    assert "rfi_status" in types


def test_rfi_list_for_rfp_is_owner_only(client, helpers):
    org, contractor, stranger, rfp, rfi = _setup(client, helpers)
    assert client.get(f"/api/rfps/{rfp['id']}/rfi", headers=stranger.headers).status_code == 403
    listed = client.get(f"/api/rfps/{rfp['id']}/rfi", headers=org.headers).json()
    assert [r["id"] for r in listed] == [rfi["id"]]


def test_my_rfis_match_email_case_insensitively(client, helpers, session):
    org = helpers.register(client, "org@builders.com")
    contractor = helpers.register(client, "Bob@Roofing.com")
    rfp = helpers.rfp(client, org)
    session.add(Rfi(rfp_id=rfp["id"], email="bob@roofing.com", message="Imported question"))
    session.commit()

    mine = client.get("/api/rfis", headers=contractor.headers).json()
    assert [r["message"] for r in mine] == ["Imported question"]
    assert client.get(f"/api/rfis/{mine[0]['id']}/messages", headers=contractor.headers).status_code == 200
