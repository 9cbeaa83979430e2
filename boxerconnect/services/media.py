"""Media upload flows on top of a storage backend: route by kind, replace, remove."""

import logging
from typing import Optional

from boxerconnect.core.upload_validation import MediaKind, validate_upload
from boxerconnect.schemas.media import StoredAsset, UploadOptions
from boxerconnect.storage.base import StorageBackend
from boxerconnect.storage.errors import InvalidUpload, StorageError

logger = logging.getLogger(__name__)


def to_key(storage: StorageBackend, key_or_url: str) -> Optional[str]:
    """Accept either a stored key or the URL get_url produced for it."""
    if "://" in key_or_url or key_or_url.startswith("/"):
        return storage.key_from_url(key_or_url)
    return key_or_url


async def save_media(
    storage: StorageBackend,
    content: bytes,
    filename: str,
    content_type: Optional[str],
    directory: Optional[str] = None,
    expected: Optional[MediaKind] = None,
) -> StoredAsset:
    """Validate an upload, then store images through the transform and videos verbatim."""
    kind, err = validate_upload(filename, content_type, len(content), expected)
    if err or kind is None:
        raise InvalidUpload(err or "Unsupported file type")
    options = UploadOptions(directory=directory)
    if kind == "image":
        return await storage.store(content, filename, content_type or "", options)
    return await storage.store_raw(content, filename, content_type or "application/octet-stream", options)


async def remove_media(storage: StorageBackend, previous: str) -> None:
    """Delete by key or URL. URLs that do not belong to this backend are ignored."""
    key = to_key(storage, previous)
    if not key:
        logger.warning("Not a URL of the active storage backend, nothing deleted: %s", previous[:80])
        return
    await storage.delete(key)


async def replace_media(
    storage: StorageBackend,
    previous: Optional[str],
    content: bytes,
    filename: str,
    content_type: Optional[str],
    directory: Optional[str] = None,
    expected: Optional[MediaKind] = None,
) -> StoredAsset:
    """
    Delete-then-store. The new asset always gets a new key.
    Failing to delete the previous asset is logged and does not block the new upload.
    """
    # Validate first so a rejected upload never removes the existing asset
    kind, err = validate_upload(filename, content_type, len(content), expected)
    if err or kind is None:
        raise InvalidUpload(err or "Unsupported file type")
    if previous:
        try:
            await remove_media(storage, previous)
        except StorageError as e:
            logger.error("Failed to delete previous media %s: %s", previous[:80], e)
    return await save_media(storage, content, filename, content_type, directory, expected)
