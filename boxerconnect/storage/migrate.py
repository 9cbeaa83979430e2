"""Copy assets from the local backend into another backend."""

import asyncio
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, Optional

from boxerconnect.schemas.media import StoredAsset, UploadOptions
from boxerconnect.storage.base import StorageBackend
from boxerconnect.storage.errors import StorageError
from boxerconnect.storage.local_storage import LocalStorage

logger = logging.getLogger(__name__)

BATCH_SIZE = 10


@dataclass
class MigrationReport:
    total: int = 0
    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    moved: dict[str, StoredAsset] = field(default_factory=dict)
    errors: list[tuple[str, str]] = field(default_factory=list)


async def _migrate_one(
    source: LocalStorage,
    target: StorageBackend,
    key: str,
    report: MigrationReport,
    dry_run: bool,
) -> None:
    try:
        path = source.resolve_path(key)
    except StorageError as e:
        report.failed += 1
        report.errors.append((key, str(e)))
        return
    if not path.is_file():
        logger.warning("File not found in local storage: %s", key)
        report.skipped += 1
        report.errors.append((key, "File not found in local storage"))
        return
    if dry_run:
        report.skipped += 1
        return

    parent = PurePosixPath(key).parent.as_posix()
    directory = None if parent == "." else parent
    mime_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    try:
        content = await source.read(key)
        stored = await target.store_raw(content, key, mime_type, UploadOptions(directory=directory))
    except (StorageError, OSError) as e:
        logger.error("Failed to migrate %s: %s", key, e)
        report.failed += 1
        report.errors.append((key, str(e)))
        return
    report.migrated += 1
    report.moved[key] = stored
    logger.info("Migrated %s -> %s", key, stored.key)


async def migrate_assets(
    source: LocalStorage,
    target: StorageBackend,
    keys: Optional[Iterable[str]] = None,
    batch_size: int = BATCH_SIZE,
    dry_run: bool = False,
) -> MigrationReport:
    """
    Copy each key (default: everything under the source root) into target with store_raw.
    Targets assign new keys; the old -> new mapping is in report.moved. Failures never abort the run.
    """
    report = MigrationReport()
    pending = list(keys) if keys is not None else list(source.iter_keys())
    report.total = len(pending)
    for start in range(0, len(pending), batch_size):
        batch = pending[start:start + batch_size]
        await asyncio.gather(*(_migrate_one(source, target, key, report, dry_run) for key in batch))
    logger.info(
        "Migration finished: %d total, %d migrated, %d skipped, %d failed",
        report.total, report.migrated, report.skipped, report.failed,
    )
    return report
