#!/usr/bin/env python3
"""
Create the Supabase Storage bucket used for media (public, MIME allow-list, size limit).
Safe to run repeatedly. Reads SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY from .env via config.
"""

import asyncio
import sys

from boxerconnect.storage import BackendUnavailable, StorageProvider, SupabaseStorage, select_storage


async def main() -> int:
    storage = select_storage(StorageProvider.SUPABASE)
    if not isinstance(storage, SupabaseStorage):
        print("FAIL: Supabase storage is not available")
        return 1
    try:
        await storage.create_bucket()
    except BackendUnavailable as e:
        print(f"FAIL: {e}")
        return 1
    stats = await storage.storage_stats()
    print(f"Bucket: {stats['bucketName']}")
    print(f"Public URL: {stats['publicUrl']}")
    print("OK: bucket is ready.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
