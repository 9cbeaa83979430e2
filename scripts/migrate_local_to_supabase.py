#!/usr/bin/env python3
"""Copy media from local storage into the Supabase bucket.

Supabase assigns new keys; the old -> new mapping is printed and optionally written as JSON lines
so the caller can update the records that reference the old URLs.
"""

import argparse
import asyncio
import json
import logging
import sys

from boxerconnect.storage import LocalStorage, StorageProvider, SupabaseStorage, select_storage
from boxerconnect.storage.migrate import BATCH_SIZE, migrate_assets


def parse_args():
    p = argparse.ArgumentParser(description="Migrate media files from local storage to Supabase Storage")
    p.add_argument("keys", nargs="*", help="Keys to migrate (default: every file under the local root)")
    p.add_argument("--dry-run", action="store_true")
    p.add_argument("--batch-size", type=int, default=BATCH_SIZE)
    p.add_argument("--report-jsonl", type=str, default=None)
    return p.parse_args()


async def run(args) -> int:
    source = select_storage(StorageProvider.LOCAL)
    target = select_storage(StorageProvider.SUPABASE)
    if not isinstance(source, LocalStorage) or not isinstance(target, SupabaseStorage):
        print("ERROR: could not select local source and Supabase target", file=sys.stderr)
        return 2
    if not args.dry_run and not await target.check_bucket():
        print(f"ERROR: Supabase bucket '{target.bucket}' does not exist", file=sys.stderr)
        return 2

    report = await migrate_assets(
        source,
        target,
        keys=args.keys or None,
        batch_size=args.batch_size,
        dry_run=args.dry_run,
    )

    if args.report_jsonl:
        with open(args.report_jsonl, "a", encoding="utf-8") as fp:
            for old_key, stored in report.moved.items():
                row = {"action": "migrated", "old_key": old_key, "new_key": stored.key, "url": stored.url}
                fp.write(json.dumps(row, ensure_ascii=False) + "\n")
            for key, error in report.errors:
                fp.write(json.dumps({"action": "error", "old_key": key, "error": error}, ensure_ascii=False) + "\n")

    summary = {
        "total": report.total,
        "migrated": report.migrated,
        "skipped": report.skipped,
        "failed": report.failed,
    }
    print(json.dumps(summary, indent=2))
    return 0 if report.failed == 0 else 1


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    return asyncio.run(run(parse_args()))


if __name__ == "__main__":
    raise SystemExit(main())
