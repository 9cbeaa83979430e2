"""Pydantic schemas for stored media."""

from typing import Optional

from pydantic import BaseModel


class StoredAsset(BaseModel):
    """Descriptor returned by every successful store call."""

    key: str
    url: str
    size: int
    mimeType: str


class UploadOptions(BaseModel):
    """Caller options for a store call. directory is untrusted until sanitized."""

    directory: Optional[str] = None
