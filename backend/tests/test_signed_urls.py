"""Tests for signed URL utilities and the photo upload endpoint."""

from datetime import timedelta
from uuid import uuid4

import pytest

from issue_reporter.utils import signed_urls
from tests.conftest import bearer


class DummyClient:
    def __init__(self, url="https://signed"):
        self.url = url
        self.calls = []

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        self.calls.append(
            {"ClientMethod": ClientMethod, "Params": Params, "ExpiresIn": ExpiresIn}
        )
        return self.url


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.S3_BUCKET_NAME", "bucket")
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.AWS_REGION", "us-east-1")
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.AWS_ACCESS_KEY_ID", "key")
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.AWS_SECRET_ACCESS_KEY", "secret")


@pytest.fixture
def s3(monkeypatch):
    client = DummyClient()
    monkeypatch.setattr(signed_urls, "_s3_client", lambda: client)
    return client


def test_generate_presigned_get(s3):
    url = signed_urls.generate_presigned_get("path/to/object")

    assert url == "https://signed"
    assert s3.calls[0]["ClientMethod"] == "get_object"
    assert s3.calls[0]["Params"] == {"Bucket": "bucket", "Key": "path/to/object"}


def test_generate_presigned_put(s3):
    expires = timedelta(minutes=5)
    signed_urls.generate_presigned_put("upload/file", expires=expires, content_type="image/png")

    call = s3.calls[0]
    assert call["ClientMethod"] == "put_object"
    assert call["Params"]["ContentType"] == "image/png"
    assert call["ExpiresIn"] == int(expires.total_seconds())


def test_generate_presigned_no_bucket(monkeypatch):
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.S3_BUCKET_NAME", "")
    with pytest.raises(ValueError):
        signed_urls.generate_presigned_get("missing")


def test_photo_object_key_is_scoped_and_sanitised():
    user_id = uuid4()
    key = signed_urls.photo_object_key(user_id, "../../My Photo (1).JPG")

    prefix, owner, name = key.split("/")
    assert prefix == "issue-photos"
    assert owner == str(user_id)
    assert name.endswith("_My_Photo_1_.JPG")
    assert signed_urls.photo_object_key(user_id, "...").endswith("_photo")


@pytest.mark.asyncio
async def test_presign_put_for_citizen(api_client, citizen, s3):
    response = await api_client.post(
        "/api/v1/uploads/presign",
        json={"filename": "hole.jpg", "content_type": "image/jpeg"},
        headers=bearer(citizen["access_token"]),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["url"] == "https://signed"
    assert body["key"].startswith(f"issue-photos/{citizen['user']['id']}/")
    assert s3.calls[0]["Params"]["ContentType"] == "image/jpeg"


@pytest.mark.asyncio
async def test_presign_requires_login(api_client, s3):
    response = await api_client.post("/api/v1/uploads/presign", json={})
    assert response.status_code == 401
    assert s3.calls == []


@pytest.mark.asyncio
async def test_presign_get_of_another_users_photo(api_client, citizen, admin, s3):
    key = f"issue-photos/{uuid4()}/abc_photo.jpg"
    payload = {"mode": "get", "key": key}

    denied = await api_client.post(
        "/api/v1/uploads/presign", json=payload, headers=bearer(citizen["access_token"])
    )
    assert denied.status_code == 403

    allowed = await api_client.post(
        "/api/v1/uploads/presign", json=payload, headers=bearer(admin["access_token"])
    )
    assert allowed.status_code == 200
    assert allowed.json()["key"] == key


@pytest.mark.asyncio
async def test_presign_without_bucket(api_client, citizen, monkeypatch):
    monkeypatch.setattr("issue_reporter.utils.signed_urls.settings.S3_BUCKET_NAME", "")

    response = await api_client.post(
        "/api/v1/uploads/presign", json={}, headers=bearer(citizen["access_token"])
    )

    assert response.status_code == 503
    assert response.json()["detail"] == "Photo uploads are not configured"
