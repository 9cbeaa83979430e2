"""Abstract storage backend."""

import re
import uuid
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Optional

from boxerconnect.schemas.media import StoredAsset, UploadOptions
from boxerconnect.storage.errors import BackendUnavailable
from boxerconnect.storage.images import ImageTransform
from boxerconnect.storage.paths import join_key, sanitize_directory

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")


class StorageBackend(ABC):
    """Interface for media storage (local disk or object store)."""

    def __init__(self, transformer: Optional[ImageTransform] = None) -> None:
        self._transformer = transformer

    @property
    def transformer(self) -> ImageTransform:
        """Image pipeline from config, built on first use. Bad image settings raise BackendUnavailable here."""
        if self._transformer is None:
            try:
                self._transformer = ImageTransform()
            except ValueError as exc:
                raise BackendUnavailable(f"Invalid image settings: {exc}") from exc
        return self._transformer

    @abstractmethod
    async def store(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> StoredAsset:
        """
        Transform an image and store it under a generated key.
        The original filename and MIME type are not used for the key; output is always the transform's format.
        """
        ...

    @abstractmethod
    async def store_raw(
        self,
        content: bytes,
        filename: str,
        mime_type: str,
        options: Optional[UploadOptions] = None,
    ) -> StoredAsset:
        """Store bytes verbatim (videos). Keeps the original extension and declared MIME type."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the asset at key. Missing assets are not an error."""
        ...

    @abstractmethod
    def get_url(self, key: str) -> str:
        """Public URL for key. Pure string construction."""
        ...

    def key_from_url(self, url: str) -> Optional[str]:
        """Inverse of get_url: the key for a URL this backend produced, else None."""
        prefix = self.get_url("")
        url = url.strip().split("?", 1)[0]
        if not url.startswith(prefix):
            return None
        return url[len(prefix):].lstrip("/") or None

    def resolve_directory(self, options: Optional[UploadOptions]) -> Optional[str]:
        """Sanitized directory from options, or None for the backend root."""
        if options is None or not options.directory:
            return None
        return sanitize_directory(options.directory)

    def generate_key(self, directory: Optional[str], extension: str) -> str:
        """Build directory/<uuid4>.<ext>. extension may be empty or start with a dot."""
        extension = extension.lstrip(".")
        name = str(uuid.uuid4())
        filename = f"{name}.{extension}" if extension else name
        return join_key(directory, filename)


def raw_extension(filename: str) -> str:
    """Original extension ('.mp4') if it is plain alphanumeric, else ''."""
    suffix = PurePosixPath(filename.replace("\\", "/")).suffix
    return suffix if _EXTENSION_RE.match(suffix) else ""
