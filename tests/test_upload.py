import httpx
import pytest

from quickcourt.main import app
from quickcourt.services.storage import SupabaseStorage, get_storage_service
from tests.factories import auth_headers


class FakeBucket:
    def __init__(self, failures=0, error=None):
        self.failures = failures
        self.error = error
        self.attempts = 0
        self.uploaded = {}
        self.removed = []

    def upload(self, path, content, options):
        self.attempts += 1
        if self.error:
            raise self.error
        if self.failures:
            self.failures -= 1
            raise httpx.ConnectError("storage unreachable")
        self.uploaded[path] = (content, options)

    def get_public_url(self, path):
        return f"https://cdn.quickcourt.io/{path}"

    def remove(self, paths):
        self.removed.extend(paths)


class FakeClient:
    def __init__(self, bucket):
        self.storage = self
        self.bucket = bucket

    def from_(self, name):
        return self.bucket


@pytest.fixture
def bucket(client):
    fake = FakeBucket()
    storage = SupabaseStorage(client=FakeClient(fake), bucket="test-bucket")
    app.dependency_overrides[get_storage_service] = lambda: storage
    return fake


def png(name="court.png", size=128):
    return ("file", (name, b"\x89PNG" + b"0" * size, "image/png"))


def test_upload_returns_url_and_public_id(client, owner, bucket):
    response = client.post("/upload/image", files=[png()], headers=auth_headers(owner))

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["public_id"].startswith("venues/") and body["public_id"].endswith(".png")
    assert body["url"] == f"https://cdn.quickcourt.io/{body['public_id']}"
    assert body["public_id"] in bucket.uploaded


def test_upload_many(client, owner, bucket):
    files = [("files", ("a.jpg", b"jpeg", "image/jpeg")), ("files", ("b.webp", b"webp", "image/webp"))]
    response = client.post("/upload/images", files=files, headers=auth_headers(owner))

    assert response.status_code == 201
    assert len(response.json()) == 2
    assert len(bucket.uploaded) == 2


def test_rejects_other_file_types(client, owner, bucket):
    response = client.post("/upload/image", files=[png(name="notes.pdf")], headers=auth_headers(owner))
    assert response.status_code == 422
    assert bucket.uploaded == {}


def test_rejects_large_files(client, owner, bucket):
    response = client.post("/upload/image", files=[png(size=6 * 1024 * 1024)], headers=auth_headers(owner))
    assert response.status_code == 422


def test_transient_failures_are_retried(client, owner, bucket):
    bucket.failures = 2
    response = client.post("/upload/image", files=[png()], headers=auth_headers(owner))
    assert response.status_code == 201
    assert bucket.attempts == 3


def test_persistent_failure_is_an_upstream_error(client, owner, bucket):
    bucket.failures = 10
    response = client.post("/upload/image", files=[png()], headers=auth_headers(owner))
    assert response.status_code == 502


def test_storage_api_errors_are_not_retried(client, owner, bucket):
    bucket.error = RuntimeError("Bucket not found")
    response = client.post("/upload/image", files=[png()], headers=auth_headers(owner))

    assert response.status_code == 502
    assert bucket.attempts == 1


def test_delete_image(client, owner, bucket):
    response = client.delete("/upload/image", params={"public_id": "venues/abc.png"}, headers=auth_headers(owner))
    assert response.status_code == 204
    assert bucket.removed == ["venues/abc.png"]


def test_players_cannot_upload(client, player, bucket):
    assert client.post("/upload/image", files=[png()], headers=auth_headers(player)).status_code == 403
