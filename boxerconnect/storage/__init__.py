# Storage backends

import logging
from enum import Enum
from functools import lru_cache
from typing import Optional

from boxerconnect import config
from boxerconnect.storage.base import StorageBackend
from boxerconnect.storage.errors import (
    BackendUnavailable,
    InvalidPath,
    InvalidUpload,
    ProcessingError,
    StorageError,
)
from boxerconnect.storage.local_storage import LocalStorage
from boxerconnect.storage.supabase_storage import SupabaseStorage

logger = logging.getLogger(__name__)


class StorageProvider(str, Enum):
    LOCAL = "local"
    SUPABASE = "supabase"
    S3 = "s3"  # reserved, no driver yet


_ALIASES = {"remote": StorageProvider.SUPABASE}


def parse_provider(tag: Optional[str]) -> StorageProvider:
    """Map a provider tag to a StorageProvider. Missing or unknown tags mean local."""
    if tag is None:
        return StorageProvider.LOCAL
    if isinstance(tag, StorageProvider):
        return tag
    normalized = tag.strip().lower()
    if not normalized:
        return StorageProvider.LOCAL
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    try:
        return StorageProvider(normalized)
    except ValueError:
        logger.warning("Unknown storage provider %r, falling back to local storage", tag)
        return StorageProvider.LOCAL


@lru_cache()
def _build(provider: StorageProvider) -> StorageBackend:
    if provider is StorageProvider.SUPABASE:
        return SupabaseStorage()
    if provider is StorageProvider.S3:
        logger.warning("S3 storage is not implemented, falling back to local storage")
        return _build(StorageProvider.LOCAL)
    return LocalStorage()


def select_storage(provider: Optional[str] = None) -> StorageBackend:
    """
    Return the backend for a provider tag. No I/O; the same tag always yields the same instance.
    Never raises for bad tags: misconfiguration surfaces later as a BackendUnavailable.
    """
    return _build(parse_provider(provider))


def get_storage() -> StorageBackend:
    """Process-wide default backend from STORAGE_BACKEND. Usable as a FastAPI dependency."""
    return select_storage(config.STORAGE_BACKEND)


def reset_storage_cache() -> None:
    _build.cache_clear()


__all__ = [
    "BackendUnavailable",
    "InvalidPath",
    "InvalidUpload",
    "LocalStorage",
    "ProcessingError",
    "StorageBackend",
    "StorageError",
    "StorageProvider",
    "SupabaseStorage",
    "get_storage",
    "parse_provider",
    "reset_storage_cache",
    "select_storage",
]
