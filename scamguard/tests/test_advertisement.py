"""
Tests for the advertisement banner configuration.
"""

import os
from fastapi.testclient import TestClient
from scamguard.main import app
from scamguard.core.errors import ProviderUnavailable
from scamguard.storage import blobs, utils as store

client = TestClient(app)

TARGET = "https://partner.example.com/offer"


def _image_path(config):
    return config["image_url"].split("/advertisement/", 1)[1]


def _image_file(path):
    return os.path.join(blobs.BLOB_DIR, "advertisement", path)


def test_default_config_is_disabled():
    response = client.get("/advertisement/")
    assert response.status_code == 200
    assert response.json()["is_enabled"] is False
    assert response.json()["image_url"] is None


def test_enable_without_image_is_rejected(auth_user):
    """Enabling needs an image and a target URL; nothing is stored otherwise."""
    auth_user("admin")
    response = client.put("/advertisement/", data={"is_enabled": "true", "target_url": TARGET})
    assert response.status_code == 422
    assert store.load_collection("advertisement") == []
    assert not os.path.exists(os.path.join(blobs.BLOB_DIR, "advertisement"))


def test_enable_without_target_is_rejected(auth_user):
    auth_user("admin")
    response = client.put(
        "/advertisement/",
        data={"is_enabled": "true"},
        files={"image": ("banner.png", b"banner", "image/png")},
    )
    assert response.status_code == 422
    assert not os.path.exists(os.path.join(blobs.BLOB_DIR, "advertisement"))


def test_admin_saves_and_public_reads(auth_user):
    auth_user("admin")
    response = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": TARGET},
        files={"image": ("Banner.PNG", b"banner", "image/png")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_enabled"] is True
    assert "image_path" not in data
    assert data["image_url"].endswith(".png")
    assert os.path.exists(_image_file(_image_path(data)))

    auth_user("anonymous")
    public = client.get("/advertisement/").json()
    assert public["target_url"] == TARGET
    assert public == data


def test_replacing_image_removes_previous(auth_user):
    auth_user("admin")
    first = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": TARGET},
        files={"image": ("a.png", b"one", "image/png")},
    ).json()
    second = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": TARGET},
        files={"image": ("b.png", b"two", "image/png")},
    ).json()

    assert _image_path(first) != _image_path(second)
    assert not os.path.exists(_image_file(_image_path(first)))
    assert os.path.exists(_image_file(_image_path(second)))
    assert len(store.load_collection("advertisement")) == 1


def test_disable_keeps_existing_image(auth_user):
    auth_user("admin")
    saved = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": TARGET},
        files={"image": ("a.png", b"one", "image/png")},
    ).json()

    response = client.put("/advertisement/", data={"is_enabled": "false", "target_url": TARGET})
    assert response.status_code == 200
    assert response.json()["is_enabled"] is False
    assert response.json()["image_url"] == saved["image_url"]

    # Re-enabling can reuse the stored image
    again = client.put("/advertisement/", data={"is_enabled": "true", "target_url": TARGET})
    assert again.status_code == 200
    assert again.json()["is_enabled"] is True


def test_invalid_target_url(auth_user):
    auth_user("admin")
    response = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": "javascript:alert(1)"},
        files={"image": ("a.png", b"one", "image/png")},
    )
    assert response.status_code == 422


def test_member_cannot_manage_advertisement(auth_user):
    auth_user("member")
    response = client.put("/advertisement/", data={"is_enabled": "false"})
    assert response.status_code == 403


def test_anonymous_cannot_manage_advertisement(auth_user):
    auth_user("anonymous")
    response = client.put("/advertisement/", data={"is_enabled": "false"})
    assert response.status_code == 401


def test_save_failure_flags_uploaded_image(auth_user, monkeypatch):
    auth_user("admin")

    def failing_insert(name, row, row_id=None):
        raise ProviderUnavailable("disk full")

    monkeypatch.setattr(store, "insert", failing_insert)
    response = client.put(
        "/advertisement/",
        data={"is_enabled": "true", "target_url": TARGET},
        files={"image": ("a.png", b"one", "image/png")},
    )
    assert response.status_code == 503
    body = response.json()
    assert body["partial_completion"]["config_saved"] is False
    assert len(body["partial_completion"]["orphaned_blobs"]) == 1
