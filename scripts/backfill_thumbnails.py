#!/usr/bin/env python3
"""
Generate thumbnails and blur placeholders for items that have none.

Usage:
    python scripts/backfill_thumbnails.py --dry-run
    python scripts/backfill_thumbnails.py --limit 50

Exits with status 1 when any item failed.
"""

import argparse
import sys
from pathlib import Path

import httpx
from minio.error import S3Error

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def load_original(item) -> bytes:
    """Read the original image from the bucket, or over HTTP for foreign URLs."""
    from tripmate.config import settings
    from tripmate.storage.object_storage import download_file, path_from_url

    path = item.storage_path or path_from_url(item.image_url)
    if path:
        return download_file(path)

    response = httpx.get(item.image_url, timeout=settings.download_timeout_seconds)
    response.raise_for_status()
    return response.content


def backfill_item(db, item) -> None:
    from tripmate.storage import item_store
    from tripmate.storage.object_storage import build_thumbnail_path, path_from_url, upload_file
    from tripmate.tools.image_processing import create_thumbnail, generate_blur_data_url

    original = load_original(item)
    print(f"  downloaded {len(original) / 1024:.1f}KB")

    thumbnail = create_thumbnail(original)
    path = item.storage_path or path_from_url(item.image_url)
    if path:
        thumbnail_path = build_thumbnail_path(path)
    else:
        thumbnail_path = f"trips/{item.trip_id}/items/{item.id}_thumb.webp"
    thumbnail_url = upload_file(thumbnail, thumbnail_path, "image/webp")
    print(f"  thumbnail {len(thumbnail) / 1024:.1f}KB -> {thumbnail_path}")

    item_store.update_item_assets(
        db,
        item,
        thumbnail_url=thumbnail_url,
        thumbnail_path=thumbnail_path,
        blur_data_url=generate_blur_data_url(original) or None,
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Backfill item thumbnails")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Process at most this many items",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List items without changing anything",
    )
    args = parser.parse_args()

    from tripmate.database import SessionLocal
    from tripmate.errors import TripMateError
    from tripmate.storage import item_store

    db = SessionLocal()
    success = 0
    failed = 0
    try:
        items = item_store.list_items_missing_thumbnails(db, args.limit)
        print(f"Found {len(items)} items without thumbnails")
        if not items:
            sys.exit(0)

        for index, item in enumerate(items, start=1):
            print(f"[{index}/{len(items)}] {item.name or item.id}")
            if args.dry_run:
                print(f"  would generate thumbnail for {item.image_url[:60]}")
                success += 1
                continue
            try:
                backfill_item(db, item)
            except (TripMateError, S3Error, httpx.HTTPError, OSError, ValueError) as e:
                print(f"  failed: {e}")
                failed += 1
            else:
                success += 1
    finally:
        db.close()

    print("=" * 50)
    print(f"Processed: {success + failed}")
    print(f"Success: {success}")
    print(f"Failed: {failed}")
    if args.dry_run:
        print("Dry run - run without --dry-run to apply changes")

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
