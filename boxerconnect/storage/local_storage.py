"""Local filesystem storage."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Iterator, Optional

import aiofiles
import aiofiles.os

from boxerconnect.config import LOCAL_FILES_BASE_URL, LOCAL_STORAGE_PATH
from boxerconnect.schemas.media import StoredAsset, UploadOptions
from boxerconnect.storage.base import StorageBackend, raw_extension
from boxerconnect.storage.errors import BackendUnavailable
from boxerconnect.storage.images import ImageTransform
from boxerconnect.storage.paths import resolve_within, validate_key

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """Store files on local disk. url is base_url/key, e.g. /uploads/<boxer-id>/<uuid>.webp."""

    def __init__(
        self,
        root: Optional[Path | str] = None,
        base_url: Optional[str] = None,
        transformer: Optional[ImageTransform] = None,
    ) -> None:
        super().__init__(transformer)
        self.root = Path(root if root is not None else LOCAL_STORAGE_PATH).resolve()
        self.base_url = (base_url if base_url is not None else LOCAL_FILES_BASE_URL).rstrip("/")

    def resolve_path(self, key: str) -> Path:
        """Absolute path for key. Re-checks containment on every call."""
        validate_key(key)
        return resolve_within(self.root, key)

    async def _write(self, content: bytes, key: str, mime_type: str) -> StoredAsset:
        path = resolve_within(self.root, key)
        created = False
        try:
            # exist_ok: a concurrent store may create the same directory first
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            # "xb": a colliding generated name fails instead of overwriting
            async with aiofiles.open(path, "xb") as f:
                created = True
                await f.write(content)
        except FileExistsError as exc:
            raise BackendUnavailable(f"Generated key already exists: {key}") from exc
        except OSError as exc:
            if created:
                await self._discard_partial(path)
            raise BackendUnavailable(f"Local write failed: {exc}") from exc
        logger.info("Stored %s (%d bytes)", key, len(content))
        return StoredAsset(key=key, url=self.get_url(key), size=len(content), mimeType=mime_type)

    async def _discard_partial(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except OSError as exc:
            logger.error("Could not remove partial file %s: %s", path, exc)

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
        return await self._write(processed, key, self.transformer.mime_type)

    async def store_raw(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> StoredAsset:
        directory = self.resolve_directory(options)
        key = self.generate_key(directory, raw_extension(filename))
        return await self._write(content, key, mime_type)

    async def delete(self, key: str) -> None:
        path = self.resolve_path(key)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("Delete of missing file ignored: %s", key)
            return
        except OSError as exc:
            raise BackendUnavailable(f"Local delete failed: {exc}") from exc
        logger.info("Deleted %s", key)

    def get_url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def read(self, key: str) -> bytes:
        path = self.resolve_path(key)
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    def iter_keys(self) -> Iterator[str]:
        """Every stored key under root, slash-separated, in sorted order."""
        if not self.root.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for name in sorted(filenames):
                yield Path(dirpath, name).relative_to(self.root).as_posix()
