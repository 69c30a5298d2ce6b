from io import BytesIO

import pytest

from .conftest import png_bytes


def _upload(client, headers, kind="brand", data=None, filename="logo.png"):
    payload = {"image": (BytesIO(data if data is not None else png_bytes()), filename)}
    return client.post(f"/api/v1/upload/{kind}", data=payload, headers=headers, content_type="multipart/form-data")


def test_upload_stores_and_serves_image(client, admin_headers, store_config):
    response = _upload(client, admin_headers)
    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["url"].startswith("/uploads/brands/brand_logo_")
    assert data["url"].endswith(".png")
    assert data["originalName"] == "logo.png"
    assert data["size"] == len(png_bytes())
    assert (store_config.upload_dir / data["path"]).exists()

    served = client.get(data["url"])
    assert served.status_code == 200
    assert served.data == png_bytes()


@pytest.mark.parametrize("kind,folder", [("category", "categories"), ("slider", "sliders"), ("product", "products"), ("media", "media")])
def test_upload_kinds_map_to_folders(client, admin_headers, kind, folder):
    data = _upload(client, admin_headers, kind=kind).get_json()["data"]
    assert data["path"].startswith(f"{folder}/")


def test_unknown_kind_rejected(client, admin_headers):
    assert _upload(client, admin_headers, kind="avatar").status_code == 400


def test_missing_file_rejected(client, admin_headers):
    response = client.post("/api/v1/upload/brand", data={}, headers=admin_headers, content_type="multipart/form-data")
    assert response.status_code == 400
    assert response.get_json()["message"] == "No image file provided"


def test_non_image_rejected(client, admin_headers):
    assert _upload(client, admin_headers, data=b"not really a png").status_code == 400
    assert _upload(client, admin_headers, filename="notes.txt").status_code == 400


def test_oversized_upload_rejected(client, admin_headers):
    # size is checked before the bytes are decoded
    response = _upload(client, admin_headers, data=png_bytes() + b"\0" * (64 * 1024))
    assert response.status_code == 400
    assert response.get_json()["message"].startswith("File too large")


def test_upload_requires_admin(app):
    anonymous = app.test_client()
    assert _upload(anonymous, {}).status_code == 401
