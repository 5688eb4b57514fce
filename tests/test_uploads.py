from urllib.parse import parse_qs

import pytest

from blog_api.clients.image_client import MAX_IMAGE_BYTES, sign_params
from blog_api.config import settings
from conftest import API, bearer

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, token, data=PNG_BYTES, content_type="image/png", filename="pic.png"):
    return client.post(
        f"{API}/upload-image",
        files={"image": (filename, data, content_type)},
        headers=bearer(token),
    )


def test_upload_returns_provider_url(client, ann, image_provider):
    resp = _upload(client, ann)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "imageUrl": "https://cdn.images.test/medium-blog/abc123.png",
    }


def test_upload_request_is_signed(client, ann, image_provider):
    _upload(client, ann)

    (request,) = image_provider.requests
    assert request.method == "POST"
    assert request.url.path == "/v1_1/demo/image/upload"

    form = {k: v[0] for k, v in parse_qs(request.content.decode()).items()}
    assert form["api_key"] == "test-api-key"
    assert form["folder"] == settings.image_folder
    assert form["file"].startswith("data:image/png;base64,")
    assert "test-api-secret" not in request.content.decode()
    assert form["signature"] == sign_params(
        {"folder": form["folder"], "timestamp": form["timestamp"]}, "test-api-secret"
    )


@pytest.mark.parametrize("content_type", ["image/svg+xml", "image/bmp", "application/pdf", "text/plain"])
def test_disallowed_type_is_rejected_without_outbound_call(client, ann, image_provider, content_type):
    resp = _upload(client, ann, content_type=content_type)
    assert resp.status_code == 400
    assert "Invalid image type" in resp.json()["error"]
    assert image_provider.requests == []


def test_oversized_image_is_rejected_without_outbound_call(client, ann, image_provider):
    resp = _upload(client, ann, data=b"\x00" * (MAX_IMAGE_BYTES + 1), content_type="image/jpeg")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Image too large. Maximum size is 5MB"}
    assert image_provider.requests == []


def test_image_at_size_limit_is_accepted(client, ann, image_provider):
    resp = _upload(client, ann, data=b"\x00" * MAX_IMAGE_BYTES, content_type="image/webp")
    assert resp.status_code == 200
    assert len(image_provider.requests) == 1


def test_missing_image_field(client, ann, image_provider):
    resp = client.post(
        f"{API}/upload-image",
        files={"file": ("pic.png", PNG_BYTES, "image/png")},
        headers=bearer(ann),
    )
    assert resp.status_code == 400
    assert image_provider.requests == []


def test_provider_rejection_surfaces_details(client, ann, image_provider):
    image_provider.status_code = 401
    image_provider.error_text = '{"error": {"message": "Invalid Signature"}}'

    resp = _upload(client, ann)
    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to upload image",
        "details": '{"error": {"message": "Invalid Signature"}}',
    }


def test_unconfigured_storage_is_500(client, ann, image_provider, monkeypatch):
    monkeypatch.setattr(settings, "cloudinary_api_secret", "")
    resp = _upload(client, ann)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Image storage configuration is incomplete"}
    assert image_provider.requests == []


def test_malformed_multipart_body_is_400(client, ann, image_provider):
    resp = client.post(
        f"{API}/upload-image",
        content=b"garbage",
        headers={"Content-Type": "multipart/form-data", **bearer(ann)},
    )
    assert resp.status_code == 400
    assert "error" in resp.json()
    assert image_provider.requests == []


def test_unreadable_provider_response_surfaces_details(client, ann, image_provider):
    image_provider.success_text = "<html>upstream proxy error</html>"

    resp = _upload(client, ann)
    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to upload image",
        "details": "<html>upstream proxy error</html>",
    }
