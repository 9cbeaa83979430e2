"""save_media / replace_media / remove_media routing and replace semantics."""

from unittest.mock import AsyncMock, patch

import pytest

from boxerconnect.services.media import remove_media, replace_media, save_media, to_key
from boxerconnect.storage.errors import BackendUnavailable, InvalidUpload


@pytest.mark.asyncio
async def test_images_go_through_store(local_storage, jpeg_bytes):
    with patch.object(local_storage, "store_raw", new=AsyncMock()) as store_raw:
        asset = await save_media(local_storage, jpeg_bytes, "p.jpg", "image/jpeg", directory="boxer-7")
    store_raw.assert_not_called()
    assert asset.key.startswith("boxer-7/")
    assert asset.mimeType == "image/webp"


@pytest.mark.asyncio
async def test_videos_go_through_store_raw(local_storage):
    with patch.object(local_storage.transformer, "transform") as transform:
        asset = await save_media(local_storage, b"\x00" * 64, "clip.mp4", "video/mp4", directory="videos")
    transform.assert_not_called()
    assert asset.key.endswith(".mp4")
    assert asset.mimeType == "video/mp4"


@pytest.mark.asyncio
async def test_rejected_upload_raises_invalid_upload(local_storage, storage_root):
    with pytest.raises(InvalidUpload):
        await save_media(local_storage, b"%PDF-1.4", "cv.pdf", "application/pdf")
    with pytest.raises(InvalidUpload):
        await save_media(local_storage, b"\x00" * 64, "clip.mp4", "video/mp4", expected="image")
    assert not storage_root.exists()


def test_to_key(local_storage):
    assert to_key(local_storage, "a/b.webp") == "a/b.webp"
    assert to_key(local_storage, "/uploads/a/b.webp") == "a/b.webp"
    assert to_key(local_storage, "https://elsewhere.example.com/a.webp") is None


@pytest.mark.asyncio
async def test_replace_deletes_previous_and_stores_new(local_storage, storage_root, jpeg_bytes):
    old = await save_media(local_storage, jpeg_bytes, "p.jpg", "image/jpeg", directory="boxer-1")

    new = await replace_media(local_storage, old.url, jpeg_bytes, "p2.jpg", "image/jpeg", directory="boxer-1")

    assert new.key != old.key
    assert not (storage_root / old.key).exists()
    assert (storage_root / new.key).exists()


@pytest.mark.asyncio
async def test_replace_survives_failed_delete(local_storage, jpeg_bytes, caplog):
    with patch.object(local_storage, "delete", new=AsyncMock(side_effect=BackendUnavailable("disk gone"))):
        new = await replace_media(local_storage, "boxer-1/old.webp", jpeg_bytes, "p.jpg", "image/jpeg")
    assert new.mimeType == "image/webp"
    assert "disk gone" in caplog.text


@pytest.mark.asyncio
async def test_replace_with_invalid_upload_keeps_previous(local_storage, storage_root, jpeg_bytes):
    old = await save_media(local_storage, jpeg_bytes, "p.jpg", "image/jpeg")
    with pytest.raises(InvalidUpload):
        await replace_media(local_storage, old.key, b"", "p.jpg", "image/jpeg")
    assert (storage_root / old.key).exists()


@pytest.mark.asyncio
async def test_remove_media_ignores_foreign_urls(local_storage):
    with patch.object(local_storage, "delete", new=AsyncMock()) as delete:
        await remove_media(local_storage, "https://elsewhere.example.com/a.webp")
        delete.assert_not_called()
        await remove_media(local_storage, "/uploads/a.webp")
        delete.assert_awaited_once_with("a.webp")


@pytest.mark.asyncio
async def test_html_named_as_video_is_rejected(local_storage, storage_root):
    with pytest.raises(InvalidUpload, match="Unsupported file type"):
        await save_media(local_storage, b"<script>alert(1)</script>", "clip.mp4", "text/html", expected="video")
    assert not storage_root.exists()
