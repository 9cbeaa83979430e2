"""Supabase Storage backend."""

import asyncio
import logging
from typing import Any, Optional

import httpx
from storage3.utils import StorageException
from supabase import Client, create_client

from boxerconnect.config import (
    ALLOWED_IMAGE_MIME_TYPES,
    ALLOWED_VIDEO_MIME_TYPES,
    SUPABASE_BUCKET,
    SUPABASE_BUCKET_SIZE_LIMIT,
    SUPABASE_CACHE_CONTROL,
    SUPABASE_PUBLIC_URL,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from boxerconnect.schemas.media import StoredAsset, UploadOptions
from boxerconnect.storage.base import StorageBackend, raw_extension
from boxerconnect.storage.errors import BackendUnavailable
from boxerconnect.storage.images import ImageTransform
from boxerconnect.storage.paths import validate_key

logger = logging.getLogger(__name__)

BACKEND_ERRORS = (StorageException, httpx.HTTPError)


def _error_message(exc: Exception) -> str:
    """storage3 errors carry either a .message attribute or a dict payload."""
    message = getattr(exc, "message", None)
    if message:
        return str(message)
    if exc.args and isinstance(exc.args[0], dict):
        payload = exc.args[0]
        return str(payload.get("message") or payload.get("error") or payload)
    return str(exc)


def _is_not_found(exc: Exception) -> bool:
    status = getattr(exc, "status", None)
    if status is None and exc.args and isinstance(exc.args[0], dict):
        status = exc.args[0].get("statusCode")
    if str(status) == "404":
        return True
    return "not found" in _error_message(exc).lower()


class SupabaseStorage(StorageBackend):
    """Store files in a Supabase Storage bucket. Returns public URLs."""

    def __init__(
        self,
        url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        bucket: Optional[str] = None,
        public_url: Optional[str] = None,
        client: Optional[Client] = None,
        transformer: Optional[ImageTransform] = None,
        cache_control: str = SUPABASE_CACHE_CONTROL,
        bucket_size_limit: int = SUPABASE_BUCKET_SIZE_LIMIT,
    ) -> None:
        super().__init__(transformer)
        self.url = (url if url is not None else SUPABASE_URL).rstrip("/")
        self.service_role_key = service_role_key if service_role_key is not None else SUPABASE_SERVICE_ROLE_KEY
        self.bucket = bucket or SUPABASE_BUCKET
        base = (public_url if public_url is not None else SUPABASE_PUBLIC_URL).rstrip("/")
        if not base:
            base = f"{self.url}/storage/v1/object/public"
        self.public_url = f"{base}/{self.bucket}"
        self.cache_control = cache_control
        self.bucket_size_limit = bucket_size_limit
        self._client = client

    def _get_client(self) -> Client:
        # Created on first use so a misconfigured backend never fails at selection time
        if self._client is not None:
            return self._client
        if not self.url or not self.service_role_key:
            raise BackendUnavailable(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set when STORAGE_BACKEND=supabase"
            )
        try:
            self._client = create_client(self.url, self.service_role_key)
        except Exception as exc:
            raise BackendUnavailable(f"Could not create Supabase client: {exc}") from exc
        return self._client

    def _objects(self) -> Any:
        return self._get_client().storage.from_(self.bucket)

    async def _upload(self, content: bytes, key: str, mime_type: str) -> StoredAsset:
        file_options = {
            "content-type": mime_type,
            "cache-control": self.cache_control,
            # Never overwrite: a colliding generated name is rejected
            "upsert": "false",
        }
        objects = self._objects()
        try:
            response = await asyncio.to_thread(objects.upload, key, content, file_options)
        except BACKEND_ERRORS as exc:
            raise BackendUnavailable(f"Supabase upload failed: {_error_message(exc)}") from exc
        path = getattr(response, "path", None)
        if not path:
            raise BackendUnavailable("Supabase upload returned no data")
        logger.info("Uploaded %s to bucket %s (%d bytes)", path, self.bucket, len(content))
        return StoredAsset(key=path, url=self.get_url(path), size=len(content), mimeType=mime_type)

    async def store(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> StoredAsset:
        directory = self.resolve_directory(options)
        processed = await asyncio.to_thread(self.transformer.transform, content)
        key = self.generate_key(directory, self.transformer.extension)
        return await self._upload(processed, key, self.transformer.mime_type)

    async def store_raw(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> StoredAsset:
        directory = self.resolve_directory(options)
        key = self.generate_key(directory, raw_extension(filename))
        return await self._upload(content, key, mime_type)

    async def delete(self, key: str) -> None:
        validate_key(key)
        objects = self._objects()
        try:
            removed = await asyncio.to_thread(objects.remove, [key])
        except BACKEND_ERRORS as exc:
            if _is_not_found(exc):
                logger.warning("File not found in Supabase: %s", key)
                return
            raise BackendUnavailable(f"Supabase delete failed: {_error_message(exc)}") from exc
        if not removed:
            # Supabase answers an unknown key with an empty list
            logger.warning("File not found in Supabase: %s", key)
            return
        logger.info("Deleted %s from bucket %s", key, self.bucket)

    def get_url(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    async def check_bucket(self) -> bool:
        """True if the bucket exists. Errors are logged, not raised."""
        try:
            client = self._get_client()
            bucket = await asyncio.to_thread(client.storage.get_bucket, self.bucket)
        except (BackendUnavailable, *BACKEND_ERRORS) as exc:
            logger.error("Supabase bucket check failed: %s", _error_message(exc))
            return False
        return bool(bucket)

    async def create_bucket(self) -> None:
        """Create the public bucket with MIME allow-list and size limit, unless it exists."""
        if await self.check_bucket():
            logger.info("Supabase bucket '%s' already exists", self.bucket)
            return
        client = self._get_client()
        bucket_options = {
            "public": True,
            "file_size_limit": self.bucket_size_limit,
            "allowed_mime_types": [*ALLOWED_IMAGE_MIME_TYPES, *ALLOWED_VIDEO_MIME_TYPES],
        }
        try:
            await asyncio.to_thread(client.storage.create_bucket, self.bucket, options=bucket_options)
        except BACKEND_ERRORS as exc:
            raise BackendUnavailable(f"Failed to create Supabase bucket: {_error_message(exc)}") from exc
        logger.info("Supabase bucket '%s' created", self.bucket)

    async def storage_stats(self) -> dict:
        stats: dict = {"bucketName": self.bucket, "publicUrl": self.public_url}
        if not await self.check_bucket():
            stats["fileCount"] = 0
        return stats
