"""
Tests for the Reports routes:
- Searching with keyword/type/category/status filters and role-based narrowing.
- Viewing single reports without leaking unapproved ones.
- Submitting reports with evidence files.
- Moderating and deleting reports (admin only).
"""

import os
from fastapi.testclient import TestClient
from scamguard.main import app
from scamguard.core.config import settings
from scamguard.storage import blobs, utils as store

client = TestClient(app)


def _ids(response):
    return [r["id"] for r in response.json()]


# ────────────────────────────────
# Search
# ────────────────────────────────
def test_anonymous_search_returns_only_approved(auth_user, add_report):
    """GET /reports → Anonymous callers never see Pending/Rejected reports."""
    auth_user("anonymous")
    approved = add_report(status="Approved")
    add_report(status="Pending")
    add_report(status="Rejected")

    response = client.get("/reports/")
    assert response.status_code == 200
    assert _ids(response) == [approved["id"]]


def test_anonymous_keyword_search_newest_first(auth_user, add_report):
    """Scenario: keyword="bank" → Approved matches in title or description, newest first."""
    auth_user("anonymous")
    older = add_report(status="Approved", title="Fake BANK call", created_at="2025-01-01T00:00:00+00:00")
    newer = add_report(status="Approved", title="SMS", description="Pretended to be my bank",
                       created_at="2025-03-01T00:00:00+00:00")
    add_report(status="Approved", title="Lottery win", description="Send fees", created_at="2025-04-01T00:00:00+00:00")
    add_report(status="Pending", title="Bank phishing", created_at="2025-05-01T00:00:00+00:00")

    response = client.get("/reports/", params={"keyword": "bank"})
    assert response.status_code == 200
    assert _ids(response) == [newer["id"], older["id"]]
    assert all(r["status"] == "Approved" for r in response.json())


def test_member_explicit_pending_filter_falls_back_to_approved(auth_user, add_report):
    """GET /reports?status=Pending → Members still only get Approved reports."""
    auth_user("member")
    approved = add_report(status="Approved")
    add_report(status="Pending")

    response = client.get("/reports/", params={"status": "Pending"})
    assert response.status_code == 200
    assert _ids(response) == [approved["id"]]


def test_admin_sees_all_statuses_by_default(auth_user, add_report):
    """GET /reports → Admins without a status filter see everything."""
    auth_user("admin")
    rows = [
        add_report(status="Approved", created_at="2025-01-01T00:00:00+00:00"),
        add_report(status="Pending", created_at="2025-01-02T00:00:00+00:00"),
        add_report(status="Rejected", created_at="2025-01-03T00:00:00+00:00"),
    ]
    newest_first = [r["id"] for r in reversed(rows)]
    assert _ids(client.get("/reports/")) == newest_first
    assert _ids(client.get("/reports/", params={"status": "All Statuses"})) == newest_first

    pending = client.get("/reports/", params={"status": "Pending"})
    assert _ids(pending) == [rows[1]["id"]]


def test_type_and_category_filters_with_sentinels(auth_user, add_report):
    auth_user("anonymous")
    website = add_report(status="Approved", target_type="Website", category="Phishing")
    add_report(status="Approved", target_type="Person", category="Scam")

    response = client.get("/reports/", params={"target_type": "Website", "category": "All Categories"})
    assert _ids(response) == [website["id"]]

    everything = client.get("/reports/", params={"target_type": "All Types", "category": "All Categories"})
    assert len(everything.json()) == 2


def test_search_ties_broken_by_id(auth_user, add_report):
    auth_user("anonymous")
    same = "2025-02-02T00:00:00+00:00"
    add_report(status="Approved", created_at=same, report_id="aaa")
    add_report(status="Approved", created_at=same, report_id="bbb")
    assert _ids(client.get("/reports/")) == ["bbb", "aaa"]


def test_search_no_match_returns_empty_list(auth_user, add_report):
    auth_user("anonymous")
    add_report(status="Approved")
    response = client.get("/reports/", params={"keyword": "nothing-matches-this"})
    assert response.status_code == 200
    assert response.json() == []


def test_search_invalid_category_is_rejected(auth_user):
    auth_user("anonymous")
    response = client.get("/reports/", params={"category": "Fraudulent"})
    assert response.status_code == 422


# ────────────────────────────────
# Single report
# ────────────────────────────────
def test_get_approved_report(auth_user, add_report):
    auth_user("anonymous")
    report = add_report(status="Approved", evidence=["reporter-1/a_shot.png"])
    response = client.get(f"/reports/{report['id']}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == report["title"]
    assert data["evidence_files"][0]["public_url"].endswith("/evidence/reporter-1/a_shot.png")


def test_get_unapproved_report_is_not_found_for_non_admins(auth_user, add_report):
    """GET /reports/{id} → Pending/Rejected look exactly like missing reports."""
    pending = add_report(status="Pending")
    rejected = add_report(status="Rejected")

    for role in ("anonymous", "member", "banned"):
        auth_user(role)
        for report in (pending, rejected):
            response = client.get(f"/reports/{report['id']}")
            assert response.status_code == 404
            assert response.json() == client.get("/reports/does-not-exist").json()


def test_admin_can_view_pending_report(auth_user, add_report):
    auth_user("admin")
    pending = add_report(status="Pending")
    response = client.get(f"/reports/{pending['id']}")
    assert response.status_code == 200
    assert response.json()["status"] == "Pending"


# ────────────────────────────────
# Submission
# ────────────────────────────────
REPORT_FORM = {
    "title": "Fake parcel delivery",
    "target_type": "Website",
    "category": "Phishing",
    "description": "Site asks for card details to release a parcel",
    "contact_info": "parcel-fees.example",
}


def test_submit_report_with_evidence(auth_user, isolated_store):
    """POST /reports → Signed-in users create Pending reports with evidence."""
    user = auth_user("member")
    files = [
        ("files", ("shot 1.png", b"png-bytes", "image/png")),
        ("files", ("mail.eml", b"eml-bytes", "message/rfc822")),
    ]
    response = client.post("/reports/", data=REPORT_FORM, files=files)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "Pending"
    assert data["reported_by_id"] == user.id
    assert data["reporter_identifier"] == user.identifier
    assert [e["original_name"] for e in data["evidence_files"]] == ["shot 1.png", "mail.eml"]

    for evidence in data["evidence_files"]:
        path = os.path.join(blobs.BLOB_DIR, "evidence", evidence["file_path"])
        assert os.path.exists(path)
    assert len(store.load_collection("evidence_files")) == 2


def test_submit_report_requires_authentication(auth_user):
    auth_user("anonymous")
    response = client.post("/reports/", data=REPORT_FORM)
    assert response.status_code == 401
    assert store.load_collection("reports") == []


def test_banned_user_cannot_submit(auth_user):
    auth_user("banned")
    response = client.post("/reports/", data=REPORT_FORM)
    assert response.status_code == 401


def test_submit_report_too_many_files(auth_user):
    auth_user("member")
    files = [("files", (f"f{i}.png", b"x", "image/png")) for i in range(settings.MAX_EVIDENCE_FILES + 1)]
    response = client.post("/reports/", data=REPORT_FORM, files=files)
    assert response.status_code == 422
    assert "maximum" in response.json()["detail"]
    assert store.load_collection("reports") == []


def test_submit_report_missing_title(auth_user):
    auth_user("member")
    response = client.post("/reports/", data={**REPORT_FORM, "title": "   "})
    assert response.status_code == 422


# ────────────────────────────────
# Moderation
# ────────────────────────────────
def test_admin_approves_then_member_sees_and_comments(auth_user, add_report):
    """Scenario: approve R1 → it appears in member listings → member comment is stored."""
    report = add_report(status="Pending")

    auth_user("admin")
    response = client.patch(f"/reports/{report['id']}/status", json={"status": "Approved"})
    assert response.status_code == 200
    assert response.json()["status"] == "Approved"

    member = auth_user("member")
    assert report["id"] in _ids(client.get("/reports/"))

    comment = client.post(f"/reports/{report['id']}/comments", json={"text": "Got the same call"})
    assert comment.status_code == 201
    stored = store.load_collection("comments")
    assert stored[0]["report_id"] == report["id"]
    assert stored[0]["user_id"] == member.id


def test_update_status_forbidden_for_members(auth_user, add_report):
    report = add_report(status="Pending")
    auth_user("member")
    response = client.patch(f"/reports/{report['id']}/status", json={"status": "Approved"})
    assert response.status_code == 403
    assert response.json() == {"detail": "Not permitted."}
    assert store.get("reports", report["id"])["status"] == "Pending"


def test_update_status_unknown_report(auth_user):
    auth_user("admin")
    response = client.patch("/reports/missing/status", json={"status": "Approved"})
    assert response.status_code == 404


def test_update_status_back_to_pending_rejected(auth_user, add_report):
    report = add_report(status="Approved")
    auth_user("admin")
    response = client.patch(f"/reports/{report['id']}/status", json={"status": "Pending"})
    assert response.status_code == 422
    assert store.get("reports", report["id"])["status"] == "Approved"


# ────────────────────────────────
# Deletion
# ────────────────────────────────
def test_delete_report_success(auth_user, add_report):
    """DELETE /reports/{id} → Admin removes report, comments, evidence rows and blobs."""
    report = add_report(status="Approved", evidence=["u/one.png", "u/two.png"])
    add_report(status="Approved", report_id="keep-me", evidence=["u/other.png"])
    store.insert("comments", {"report_id": report["id"], "user_id": "x", "text": "hi", "is_anonymous": False})

    auth_user("admin")
    response = client.delete(f"/reports/{report['id']}")
    assert response.status_code == 200
    assert "deleted" in response.json()["message"]

    assert store.get("reports", report["id"]) is None
    assert [e["report_id"] for e in store.load_collection("evidence_files")] == ["keep-me"]
    assert store.load_collection("comments") == []
    assert not os.path.exists(os.path.join(blobs.BLOB_DIR, "evidence", "u", "one.png"))
    assert os.path.exists(os.path.join(blobs.BLOB_DIR, "evidence", "u", "other.png"))


def test_delete_report_forbidden(auth_user, add_report):
    report = add_report(status="Approved")
    auth_user("member")
    response = client.delete(f"/reports/{report['id']}")
    assert response.status_code == 403
    assert store.get("reports", report["id"]) is not None


def test_delete_report_not_found(auth_user):
    auth_user("admin")
    response = client.delete("/reports/rep_missing")
    assert response.status_code == 404
