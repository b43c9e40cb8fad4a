"""POST /v1/upload – multipart image preview."""

import io

from PIL import Image

from core.config import settings

from conftest import make_image, png_header_only


def _upload(client, data, filename="pic.png", content_type="image/png"):
    return client.post("/v1/upload", files={"image": (filename, data, content_type)})


def test_small_image_is_returned_unchanged(client):
    raw = make_image((40, 30))
    resp = _upload(client, raw)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content == raw


def test_large_image_is_downscaled(client):
    resp = _upload(client, make_image((1280, 960), fmt="JPEG"), "big.jpg", "image/jpeg")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert Image.open(io.BytesIO(resp.content)).size == (320, 240)


def test_missing_file(client):
    resp = client.post("/v1/upload")
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "The file wasn't uploaded"


def test_wrong_mime_type(client):
    resp = _upload(client, b"hello", "notes.txt", "text/plain")
    assert resp.status_code == 400


def test_unreadable_image(client):
    resp = _upload(client, b"definitely not a png")
    assert resp.status_code == 422
    assert resp.json()["error"]["message"] == "Error reading file"


def test_oversized_file(client):
    resp = _upload(client, b"\0" * (settings.max_upload_size + 1))
    assert resp.status_code == 413


def test_huge_declared_dimensions(client):
    resp = _upload(client, png_header_only(20000, 20000))
    assert resp.status_code == 422
    assert resp.json()["error"]["description"] == "Image dimensions are too large"
