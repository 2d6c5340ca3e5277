from unittest import mock

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from .factories import DEFAULT_PASSWORD, UserFactory

pytestmark = pytest.mark.django_db

AVATAR_URL = "/api/v1/user/upload-avatar/"
UPDATE_URL = "/api/v1/user/update-profile/"


@pytest.fixture
def user():
    return UserFactory(name="Alice", email="alice@example.com", mobile="")


@pytest.fixture
def auth_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _image(name="me.png"):
    return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\nfake-image-bytes", content_type="image/png")


def test_upload_avatar_stores_file_and_saves_url(auth_client, user):
    resp = auth_client.put(AVATAR_URL, {"avatar": _image()}, format="multipart")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "upload profile"
    url = body["data"]["avatar"]
    assert body["data"]["id"] == str(user.id)
    assert url.startswith(f"/media/avatars/{user.id}/")
    assert url.endswith(".png")

    user.refresh_from_db()
    assert user.avatar == url
    assert default_storage.exists(url.removeprefix("/media/"))


def test_upload_avatar_without_file_returns_400(auth_client):
    resp = auth_client.post(AVATAR_URL, {}, format="multipart")
    assert resp.status_code == 400
    assert resp.json()["message"] == "provide avatar image"


def test_upload_avatar_requires_authentication():
    resp = APIClient().post(AVATAR_URL, {"avatar": _image()}, format="multipart")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_update_only_mobile_leaves_other_fields(auth_client, user):
    resp = auth_client.put(UPDATE_URL, {"mobile": "+14155552671"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["data"]["mobile"] == "+14155552671"

    user.refresh_from_db()
    assert user.mobile == "+14155552671"
    assert user.name == "Alice"
    assert user.email == "alice@example.com"
    assert user.check_password(DEFAULT_PASSWORD)


def test_update_ignores_empty_values(auth_client, user):
    resp = auth_client.post(UPDATE_URL, {"name": "", "email": "", "mobile": "123"}, format="json")
    assert resp.status_code == 200
    user.refresh_from_db()
    assert user.name == "Alice"
    assert user.email == "alice@example.com"


def test_update_password_is_rehashed(auth_client, user):
    resp = auth_client.put(UPDATE_URL, {"password": "n3w-secret"}, format="json")
    assert resp.status_code == 200
    assert "password" not in resp.json()["data"]

    user.refresh_from_db()
    assert user.password != "n3w-secret"
    assert user.check_password("n3w-secret")


def test_update_email_to_taken_address_is_rejected(auth_client, user):
    UserFactory(email="bob@example.com")
    resp = auth_client.put(UPDATE_URL, {"email": "bob@example.com"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email in use"
    user.refresh_from_db()
    assert user.email == "alice@example.com"


def test_update_email_claimed_concurrently_is_rejected(auth_client, user):
    # Another account takes the address between the availability check and the save
    UserFactory(email="bob@example.com")
    with mock.patch("users.services.email_taken", return_value=False):
        resp = auth_client.put(UPDATE_URL, {"email": "bob@example.com", "name": "Al"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email in use"
    user.refresh_from_db()
    assert user.email == "alice@example.com"
    assert user.name == "Alice"


def test_update_rejects_malformed_email(auth_client):
    resp = auth_client.put(UPDATE_URL, {"email": "not-an-email"}, format="json")
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("email:")


def test_update_requires_authentication():
    resp = APIClient().put(UPDATE_URL, {"name": "Mallory"}, format="json")
    assert resp.status_code == 401
