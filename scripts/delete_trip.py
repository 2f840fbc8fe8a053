#!/usr/bin/env python3
"""
Delete a trip with all of its items and stored assets.

Usage:
    python scripts/delete_trip.py TRIP_ID
    python scripts/delete_trip.py TRIP_ID --dry-run

Items (and their blobs) are removed first, then the trip document.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Delete a trip and everything under it")
    parser.add_argument("trip_id", help="Trip to delete")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without deleting",
    )
    args = parser.parse_args()

    from tripmate.database import SessionLocal
    from tripmate.services.item_lifecycle import asset_paths, delete_trip_cascade
    from tripmate.storage import item_store, trip_store

    db = SessionLocal()
    try:
        trip = trip_store.get_trip_by_id(db, args.trip_id)
        items = item_store.list_items(db, args.trip_id)

        print("=" * 60)
        print(f"Trip: {trip.trip_name if trip else '(no trip document)'} [{args.trip_id}]")
        print(f"Items: {len(items)}")
        print("=" * 60)

        if trip is None and not items:
            print("Nothing to delete")
            sys.exit(1)

        if args.dry_run:
            for item in items:
                print(f"  would delete {item.id} {item.name!r}")
                for path in asset_paths(item):
                    print(f"    blob {path}")
            print("\nDry run - nothing deleted")
            sys.exit(0)

        result = delete_trip_cascade(db, args.trip_id)
    finally:
        db.close()

    print(f"Deleted {result.items_deleted} items")
    if result.orphaned_paths:
        print(f"Could not delete {len(result.orphaned_paths)} blobs:")
        for path in result.orphaned_paths:
            print(f"  {path}")
        sys.exit(1)
    print("Done")


if __name__ == "__main__":
    main()
