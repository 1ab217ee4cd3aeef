"""
Shared fixtures: every test gets its own data and blob directories, and
can impersonate callers through FastAPI's dependency overrides.
"""

import uuid
import pytest
from scamguard.main import app
from scamguard.authentication.schemas import Identity
from scamguard.authentication.security import get_current_identity
from scamguard.storage import blobs, utils as store


@pytest.fixture(autouse=True)
def isolated_store(tmp_path, monkeypatch):
    """Point the persistent store and blob store at temporary directories."""
    monkeypatch.setattr(store, "DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setattr(blobs, "BLOB_DIR", str(tmp_path / "blobs"))
    yield tmp_path
    app.dependency_overrides.clear()


@pytest.fixture
def make_identity():
    """Build an Identity and provision its profile row."""

    def _make(role: str = "member", identifier: str = None, provision: bool = True) -> Identity:
        user_id = str(uuid.uuid4())
        identity = Identity(
            id=user_id,
            identifier=identifier or f"{role}-{user_id[:8]}@example.com",
            is_admin=role == "admin",
            is_banned=role == "banned",
            is_verified=True,
        )
        if provision:
            rows = store.load_collection("profiles")
            rows.append({**identity.model_dump(), "created_at": "2025-01-01T00:00:00+00:00"})
            store.save_collection("profiles", rows)
        return identity

    return _make


@pytest.fixture
def auth_user(make_identity):
    """
    Override `get_current_identity` to simulate a caller.
    role: "admin", "member", "banned" or "anonymous".
    """

    def _set_user(role: str = "member", identity: Identity = None):
        if role == "anonymous":
            app.dependency_overrides[get_current_identity] = lambda: None
            return None
        identity = identity or make_identity(role)
        app.dependency_overrides[get_current_identity] = lambda: identity
        return identity

    yield _set_user

    app.dependency_overrides.clear()


@pytest.fixture
def add_report():
    """Write a report row directly, bypassing the lifecycle."""

    def _add(status="Pending", title="Fake bank SMS", description="Asked for my PIN",
             created_at="2025-01-01T00:00:00+00:00", target_type="Business", category="Scam",
             reported_by_id="reporter-1", report_id=None, evidence=()):
        row = {
            "id": report_id or str(uuid.uuid4()),
            "title": title,
            "target_type": target_type,
            "category": category,
            "description": description,
            "contact_info": None,
            "reported_by_id": reported_by_id,
            "reporter_identifier": "reporter@example.com",
            "status": status,
            "created_at": created_at,
        }
        rows = store.load_collection("reports")
        rows.append(row)
        store.save_collection("reports", rows)
        for path in evidence:
            blobs.upload(blobs.EVIDENCE_BUCKET, path, b"evidence-bytes")
            store.insert("evidence_files", {
                "report_id": row["id"],
                "file_path": path,
                "original_name": path.rsplit("/", 1)[-1],
                "mime_type": "image/png",
                "size": 14,
            })
        return row

    return _add
