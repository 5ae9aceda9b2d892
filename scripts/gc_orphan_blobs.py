#!/usr/bin/env python3
"""Delete uploaded images that no garage, zone or payment references anymore.

Request-time cleanup is best-effort: a failed upload sequence or a shrunk
service list can leave files behind. This sweep reclaims them. Files younger
than `--min-age-seconds` are kept so uploads of in-flight requests survive.
"""

from __future__ import annotations

import argparse
import asyncio
import time

from garagehub.config import Settings
from garagehub.repositories import (
    DatabasePool,
    GarageRepository,
    PaymentRepository,
    ZoneRepository,
)
from garagehub.services import BlobStore
from garagehub.utils.logging_setup import setup_logging


async def referenced_refs(pool) -> set[str]:
    refs: set[str] = set()
    for repo in (GarageRepository(pool), ZoneRepository(pool), PaymentRepository(pool)):
        refs.update(r for r in await repo.list_blob_refs() if r)
    return refs


def _age_seconds(blobs: BlobStore, ref: str, now: float) -> float:
    try:
        return now - blobs.path_for(ref).stat().st_mtime
    except OSError:
        return 0.0


async def find_orphans(
    blobs: BlobStore, referenced: set[str], *, min_age_seconds: float, now: float | None = None
) -> list[str]:
    now = time.time() if now is None else now
    stored = await blobs.list_refs()
    return [
        ref
        for ref in stored
        if ref not in referenced and _age_seconds(blobs, ref, now) >= min_age_seconds
    ]


async def _run(*, dry_run: bool, min_age_seconds: float) -> None:
    settings = Settings()
    setup_logging(settings)
    pool = await DatabasePool.get_pool(settings)
    try:
        blobs = BlobStore(settings)
        referenced = await referenced_refs(pool)
        orphans = await find_orphans(blobs, referenced, min_age_seconds=min_age_seconds)

        print(f"Referenced blobs: {len(referenced)}")
        print(f"Orphan blobs: {len(orphans)}")

        if not orphans:
            print("No orphan blobs to clean up.")
            return

        for ref in orphans:
            if dry_run:
                print(f"[DRY-RUN] Would delete: {ref}")
                continue
            deleted = await blobs.delete(ref)
            print(f"Deleted {ref}: {deleted}")
    finally:
        await DatabasePool.close()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--dry-run", action="store_true", help="Only list, don't delete")
    parser.add_argument(
        "--min-age-seconds",
        type=float,
        default=3600.0,
        help="Skip files modified more recently than this (default: 3600)",
    )
    args = parser.parse_args()
    asyncio.run(_run(dry_run=bool(args.dry_run), min_age_seconds=float(args.min_age_seconds)))


if __name__ == "__main__":
    main()
