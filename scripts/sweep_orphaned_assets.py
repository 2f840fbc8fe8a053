#!/usr/bin/env python3
"""
Remove stored blobs of a trip that no item references anymore.

Usage:
    python scripts/sweep_orphaned_assets.py TRIP_ID --dry-run
    python scripts/sweep_orphaned_assets.py TRIP_ID --grace-minutes 120

Blobs newer than the grace period are left alone.
"""

import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def main():
    """Main entry point."""
    from tripmate.config import settings

    parser = argparse.ArgumentParser(description="Sweep unreferenced blobs of a trip")
    parser.add_argument("trip_id", help="Trip to reconcile")
    parser.add_argument(
        "--grace-minutes",
        type=int,
        default=settings.orphan_grace_period_minutes,
        help="Skip blobs modified more recently than this",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List orphans without deleting them",
    )
    args = parser.parse_args()

    from tripmate.database import SessionLocal
    from tripmate.services.item_lifecycle import sweep_orphaned_assets

    db = SessionLocal()
    try:
        removed, failed = sweep_orphaned_assets(
            db,
            args.trip_id,
            grace=timedelta(minutes=args.grace_minutes),
            dry_run=args.dry_run,
        )
    finally:
        db.close()

    verb = "Would remove" if args.dry_run else "Removed"
    print(f"{verb} {len(removed)} orphaned blobs")
    for path in removed:
        print(f"  {path}")

    if failed:
        print(f"Failed to remove {len(failed)} blobs:")
        for path in failed:
            print(f"  {path}")
        sys.exit(1)


if __name__ == "__main__":
    main()
