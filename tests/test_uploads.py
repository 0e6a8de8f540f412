import os
import re

import pytest
from httpx import AsyncClient

from app.core.exceptions.http_exceptions import BadRequestException


@pytest.mark.asyncio
async def test_upload_and_delete(client: AsyncClient, admin, media_storage) -> None:
    response = await client.post(
        "/api/v1/uploads",
        files={"file": ("Cover Photo.PNG", b"\x89PNG fake image", "image/png")},
        data={"folder": "thumbnails"},
        headers=admin["headers"],
    )
    assert response.status_code == 201
    body = response.json()
    assert re.fullmatch(r"thumbnails/\d{13}-[a-z0-9]{6}\.png", body["path"])
    assert body["url"] == f"http://testserver/media/{body['path']}"

    stored = os.path.join(media_storage.root, body["path"])
    with open(stored, "rb") as f:
        assert f.read() == b"\x89PNG fake image"

    deleted = await client.post("/api/v1/uploads/delete", json={"url": body["url"]}, headers=admin["headers"])
    assert deleted.status_code == 200
    assert not os.path.exists(stored)

    again = await client.post("/api/v1/uploads/delete", json={"url": body["url"]}, headers=admin["headers"])
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_upload_defaults_to_content_folder(client: AsyncClient, admin) -> None:
    response = await client.post(
        "/api/v1/uploads", files={"file": ("talk.mp3", b"ID3", "audio/mpeg")}, headers=admin["headers"]
    )
    assert response.json()["path"].startswith("content/")


@pytest.mark.asyncio
async def test_upload_rejections(client: AsyncClient, admin, paid_user) -> None:
    files = {"file": ("a.txt", b"hello", "text/plain")}

    assert (await client.post("/api/v1/uploads", files=files, headers=paid_user["headers"])).status_code == 403

    bad_folder = await client.post("/api/v1/uploads", files=files, data={"folder": "../etc"}, headers=admin["headers"])
    assert bad_folder.status_code == 400

    empty = await client.post(
        "/api/v1/uploads", files={"file": ("a.txt", b"", "text/plain")}, headers=admin["headers"]
    )
    assert empty.status_code == 400

    huge = await client.post(
        "/api/v1/uploads", files={"file": ("a.bin", b"0" * (1024 * 1024 + 1), "application/octet-stream")},
        headers=admin["headers"],
    )
    assert huge.status_code == 400


@pytest.mark.asyncio
async def test_delete_outside_media_storage(client: AsyncClient, admin) -> None:
    outside = await client.post(
        "/api/v1/uploads/delete", json={"url": "http://testserver/static/logo.png"}, headers=admin["headers"]
    )
    assert outside.status_code == 400

    traversal = await client.post(
        "/api/v1/uploads/delete", json={"url": "http://testserver/media/../secrets.txt"}, headers=admin["headers"]
    )
    assert traversal.status_code == 400


def test_key_from_url(media_storage) -> None:
    assert media_storage.key_from_url("http://testserver/media/content/1-abc.mp4") == "content/1-abc.mp4"
    assert media_storage.key_from_url("/media/guides/x.pdf") == "guides/x.pdf"
    with pytest.raises(BadRequestException):
        media_storage.key_from_url("http://testserver/media/")
