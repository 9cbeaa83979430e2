"""Media API: store photos and videos, delete by key."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from boxerconnect.core.upload_validation import MAX_SIZE_BY_KIND, MediaKind
from boxerconnect.schemas.media import StoredAsset
from boxerconnect.services.media import save_media
from boxerconnect.storage import (
    BackendUnavailable,
    InvalidPath,
    InvalidUpload,
    ProcessingError,
    StorageBackend,
    StorageError,
    get_storage,
)

router = APIRouter(prefix="/media", tags=["media"])


def _to_http_error(e: StorageError) -> HTTPException:
    if isinstance(e, (InvalidPath, InvalidUpload)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ProcessingError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, BackendUnavailable):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail="Storage error")


async def _upload(
    storage: StorageBackend,
    upload_file: UploadFile,
    directory: Optional[str],
    expected: MediaKind,
) -> StoredAsset:
    if not upload_file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")
    # One byte past the limit is enough for validation to reject it
    content = await upload_file.read(MAX_SIZE_BY_KIND[expected] + 1)
    try:
        return await save_media(
            storage,
            content,
            upload_file.filename,
            upload_file.content_type,
            directory=directory,
            expected=expected,
        )
    except StorageError as e:
        raise _to_http_error(e) from e


@router.post("/photos", response_model=StoredAsset, status_code=201)
async def upload_photo(
    storage: Annotated[StorageBackend, Depends(get_storage)],
    file: UploadFile = File(...),
    directory: Optional[str] = Form(None),
) -> StoredAsset:
    """Upload a photo. Stored resized, re-encoded and without metadata."""
    return await _upload(storage, file, directory, "image")


@router.post("/videos", response_model=StoredAsset, status_code=201)
async def upload_video(
    storage: Annotated[StorageBackend, Depends(get_storage)],
    file: UploadFile = File(...),
    directory: Optional[str] = Form(None),
) -> StoredAsset:
    """Upload a video. Stored as-is with its original extension and MIME type."""
    return await _upload(storage, file, directory, "video")


@router.delete("/{key:path}", status_code=204)
async def delete_media(
    key: str,
    storage: Annotated[StorageBackend, Depends(get_storage)],
) -> None:
    """Delete a stored asset. Deleting an unknown key succeeds."""
    try:
        await storage.delete(key)
    except StorageError as e:
        raise _to_http_error(e) from e
