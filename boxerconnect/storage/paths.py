"""Directory sanitization and key validation against path traversal."""

import os
import re
from pathlib import Path

from boxerconnect.storage.errors import InvalidPath

_DIRECTORY_RE = re.compile(r"^[A-Za-z0-9_-]+(/[A-Za-z0-9_-]+)*$")
_EDGE_SLASHES_RE = re.compile(r"^/+|/+$")


def sanitize_directory(directory: str) -> str:
    """
    Clean a caller-supplied directory before it is used to build a write location.
    Strips leading/trailing slashes, then only allows [A-Za-z0-9_-] segments joined by single slashes.
    """
    cleaned = _EDGE_SLASHES_RE.sub("", directory)
    if ".." in cleaned or "//" in cleaned or cleaned.startswith("/"):
        raise InvalidPath("Invalid directory path: path traversal detected")
    if not _DIRECTORY_RE.match(cleaned):
        raise InvalidPath("Invalid directory path: contains illegal characters")
    return cleaned


def _is_absolute(key: str) -> bool:
    if key.startswith(("/", "\\")):
        return True
    if len(key) >= 2 and key[1] == ":" and key[0].isalpha():
        return True
    return os.path.isabs(key)


def validate_key(key: str) -> None:
    """Reject keys that could escape the storage root. No character whitelist here."""
    if not key:
        raise InvalidPath("Invalid file key: empty")
    if ".." in key or _is_absolute(key):
        raise InvalidPath("Invalid file key")


def resolve_within(root: Path, key: str) -> Path:
    """Resolve key under root (following symlinks) and require the result to stay inside root."""
    resolved_root = Path(root).resolve()
    candidate = (resolved_root / key).resolve()
    try:
        relative = candidate.relative_to(resolved_root)
    except ValueError as exc:
        raise InvalidPath("Invalid file path: resolves outside storage root") from exc
    if not relative.parts:
        raise InvalidPath("Invalid file path: key resolves to storage root")
    return candidate


def join_key(directory: str | None, filename: str) -> str:
    return f"{directory}/{filename}" if directory else filename
