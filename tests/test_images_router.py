import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from image_server.core.config import Settings
from image_server.main import create_app

from conftest import make_image_bytes


@pytest.fixture
def settings(storage_root):
    return Settings(UPLOAD_DIR=str(storage_root), MAX_FILE_SIZE=5 * 1024 * 1024)


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def _upload(client, data, name="photo.png"):
    return client.post("/upload", files={"file": (name, data, "image/png")})


def test_upload_and_fetch_original(client, storage_root):
    data = make_image_bytes()
    resp = _upload(client, data)
    assert resp.status_code == 200
    body = resp.json()
    assert body["url"] == f"/images/{body['reference']}"

    got = client.get(body["url"])
    assert got.status_code == 200
    assert got.headers["content-type"] == "image/png"
    assert got.headers["content-disposition"].startswith("inline;")
    assert got.content == (storage_root / body["reference"]).read_bytes()


def test_fetch_resized_variant(client):
    reference = _upload(client, make_image_bytes()).json()["reference"]

    got = client.get(f"/images/{reference}", params={"width": 120, "height": 90})

    assert got.status_code == 200
    assert "_120x90.png" in got.headers["content-disposition"]
    with Image.open(io.BytesIO(got.content)) as img:
        assert img.size == (120, 90)


def test_upload_empty_file_is_bad_request(client, storage_root):
    resp = _upload(client, b"")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Please select a file to upload"
    assert not storage_root.exists()


def test_upload_non_image_is_server_error(client):
    resp = _upload(client, b"plain text", name="notes.png")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "data": None, "error": "Failed to process image"}


def test_missing_image_is_not_found(client):
    resp = client.get("/images/2024/01/01/missing.png")
    assert resp.status_code == 404
    assert resp.json()["success"] is False

    resp = client.get("/images/2024/01/01/missing.png", params={"width": 10, "height": 10})
    assert resp.status_code == 404


def test_non_positive_dimensions_are_rejected(client):
    reference = _upload(client, make_image_bytes()).json()["reference"]
    resp = client.get(f"/images/{reference}", params={"width": 0, "height": 10})
    assert resp.status_code == 422


def test_oversized_dimensions_are_rejected(client):
    reference = _upload(client, make_image_bytes()).json()["reference"]
    resp = client.get(f"/images/{reference}", params={"width": 50000, "height": 50000})
    assert resp.status_code == 422


def test_batch_upload(client):
    resp = client.post(
        "/upload/batch",
        files=[
            ("files", ("a.png", make_image_bytes(), "image/png")),
            ("files", ("b.png", b"", "image/png")),
        ],
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [r["success"] for r in body] == [True, False]
    assert body[0]["original_filename"] == "a.png"
    assert body[1]["error"] == "File is empty"


def test_request_too_large(settings):
    settings.MAX_FILE_SIZE = 10
    client = TestClient(create_app(settings))
    resp = _upload(client, make_image_bytes())
    assert resp.status_code == 413


def test_unexpected_error_is_generic(settings):
    app = create_app(settings)

    class ExplodingService:
        def load(self, *args, **kwargs):
            raise RuntimeError("secret internals")

    app.state.image_service = ExplodingService()
    client = TestClient(app, raise_server_exceptions=False)

    resp = client.get("/images/2024/01/01/a.png")
    assert resp.status_code == 500
    assert "secret internals" not in resp.text


def test_health_reports_storage_root(client, storage_root):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["storage_root"] == str(storage_root)
