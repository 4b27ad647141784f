from __future__ import annotations

import pytest

from botanica.integrations.images import ImageUploadError, LocalImageHost

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_upload_and_serve(client):
    r = client.post(
        "/api/cloudinary/upload",
        files={"image": ("paw.PNG", PNG, "image/png")},
        data={"folder": "Balance-Botanica/Products"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["format"] == "png"
    assert body["bytes"] == len(PNG)
    assert body["publicId"].startswith("balance-botanica/products/")
    assert body["url"] == f"/uploads/{body['publicId']}.png"

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == PNG


def test_upload_without_file(client):
    r = client.post("/api/cloudinary/upload", data={"folder": "x"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "error": "No image file provided"}


def test_upload_rejects_other_files(client):
    r = client.post("/api/cloudinary/upload", files={"image": ("notes.txt", b"hello", "text/plain")})
    assert r.status_code == 400
    assert r.json()["error"] == "Unsupported image type: .txt"


def test_folder_cannot_escape_root(tmp_path):
    host = LocalImageHost(tmp_path / "uploads")
    result = host.upload(PNG, "a.png", "../../etc")
    assert result.public_id.startswith("etc/")
    assert (tmp_path / "uploads" / f"{result.public_id}.png").exists()

    with pytest.raises(ImageUploadError):
        host.upload(b"", "a.png", "x")


def test_storage_check(client):
    r = client.get("/api/cloudinary/test")
    assert r.status_code == 200
    assert r.json()["success"] is True
