"""Storage error taxonomy."""


class StorageError(Exception):
    """Base class for every error raised by the storage layer."""


class InvalidPath(StorageError, ValueError):
    """A directory or key was rejected before any bytes were touched."""


class ProcessingError(StorageError):
    """Input bytes could not be decoded or transformed as an image."""


class BackendUnavailable(StorageError):
    """The active backend failed (network, quota, permission, filesystem).

    Carries the backend's own message. Safe to retry at the caller's discretion.
    """


class InvalidUpload(StorageError, ValueError):
    """Upload rejected by type/size validation."""
