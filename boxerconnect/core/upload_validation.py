"""File validation and media kind detection for uploads."""

from typing import Literal, Optional

from boxerconnect.config import (
    ALLOWED_IMAGE_MIME_TYPES,
    ALLOWED_VIDEO_MIME_TYPES,
    MAX_FILE_SIZE_IMAGE,
    MAX_FILE_SIZE_VIDEO,
)

MediaKind = Literal["image", "video"]

MIME_TO_KIND: dict[str, MediaKind] = {
    **{mime: "image" for mime in ALLOWED_IMAGE_MIME_TYPES},
    **{mime: "video" for mime in ALLOWED_VIDEO_MIME_TYPES},
}

EXT_TO_KIND: dict[str, MediaKind] = {
    ".jpg": "image",
    ".jpeg": "image",
    ".png": "image",
    ".gif": "image",
    ".webp": "image",
    ".mp4": "video",
    ".webm": "video",
    ".mov": "video",
    ".avi": "video",
}

MAX_SIZE_BY_KIND: dict[MediaKind, int] = {
    "image": MAX_FILE_SIZE_IMAGE,
    "video": MAX_FILE_SIZE_VIDEO,
}

# Declared types that say nothing about the content
GENERIC_MIME_TYPES = {"", "application/octet-stream"}


def detect_media_kind(filename: str, content_type: Optional[str]) -> Optional[MediaKind]:
    """
    Determine media kind from content_type. The filename extension is only consulted
    when no specific type was declared (missing or application/octet-stream).
    """
    base_type = (content_type or "").split(";")[0].strip().lower()
    if base_type in MIME_TO_KIND:
        return MIME_TO_KIND[base_type]
    if base_type not in GENERIC_MIME_TYPES:
        return None
    ext = "." + filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return EXT_TO_KIND.get(ext)


def validate_upload(
    filename: str,
    content_type: Optional[str],
    size: int,
    expected: Optional[MediaKind] = None,
) -> tuple[Optional[MediaKind], Optional[str]]:
    """
    Validate file and return (kind, error_message).
    If valid, error_message is None.
    """
    kind = detect_media_kind(filename, content_type)
    if not kind:
        return None, (
            "Unsupported file type. Allowed: images (JPEG/PNG/GIF/WebP), "
            "videos (MP4/WebM/MOV/AVI)."
        )
    if expected and kind != expected:
        return kind, f"Expected a {expected} upload, got {kind}"
    if size <= 0:
        return kind, "File is empty"
    max_size = MAX_SIZE_BY_KIND[kind]
    if size > max_size:
        return kind, f"File too large. Max size for {kind}: {max_size // (1024 * 1024)} MB"
    return kind, None
