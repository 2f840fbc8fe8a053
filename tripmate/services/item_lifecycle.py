"""
Item and trip deletion with their stored assets, plus orphan reconciliation.

Blob deletes are best-effort: a blob that cannot be removed is logged and
reported, and the document delete still goes ahead.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from sqlalchemy.orm import Session

from tripmate.config import settings
from tripmate.database import utcnow
from tripmate.logging_config import get_logger
from tripmate.models import TripItem
from tripmate.storage import item_store, trip_store
from tripmate.storage.item_store import ItemDeleteResult
from tripmate.storage.object_storage import delete_file, list_paths, path_from_url

logger = get_logger(__name__)


@dataclass
class TripDeleteResult:
    success: bool = True
    trip_found: bool = True
    items_deleted: int = 0
    orphaned_paths: list[str] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": self.success}
        if self.orphaned_paths:
            body["partiallyDeleted"] = True
            body["orphanedPaths"] = self.orphaned_paths
        return body


def asset_paths(item: TripItem) -> list[str]:
    """
    Every stored blob an item references, without duplicates.

    Paths come from the stored path fields first, then from asset URLs
    (older items only carry URLs).
    """
    candidates = [item.storage_path, item.thumbnail_path]
    for url in (item.image_url, item.thumbnail_url, item.video_url, *(item.images or [])):
        candidates.append(path_from_url(url) if url else None)

    paths: list[str] = []
    for path in candidates:
        if path and path not in paths:
            paths.append(path)
    return paths


def delete_assets(paths: list[str]) -> list[str]:
    """Delete blobs one by one; returns the paths that could not be deleted."""
    orphaned = []
    for path in paths:
        if not delete_file(path, attempts=settings.asset_delete_attempts):
            orphaned.append(path)
    return orphaned


def delete_item_with_assets(db: Session, trip_id: str, item_id: str) -> ItemDeleteResult:
    """
    Delete an item's blobs, then its document.

    A missing item is a success with already_deleted=True. Blobs that
    survive every retry are returned in orphaned_paths.
    """
    item = item_store.get_item(db, trip_id, item_id)
    if item is None:
        logger.info("item_already_deleted", trip_id=trip_id, item_id=item_id)
        return ItemDeleteResult(already_deleted=True)

    orphaned = delete_assets(asset_paths(item))
    result = item_store.delete_item_record(db, trip_id, item_id)

    if orphaned:
        logger.warning(
            "item_assets_orphaned",
            trip_id=trip_id,
            item_id=item_id,
            paths=orphaned,
        )
        result.partially_deleted = True
        result.orphaned_paths = orphaned

    return result


def delete_trip_cascade(db: Session, trip_id: str) -> TripDeleteResult:
    """
    Delete every item (assets best-effort, then documents) and then the trip.

    Not atomic: a failure midway leaves the remaining items and the trip.
    """
    items = item_store.list_items(db, trip_id)

    orphaned: list[str] = []
    for item in items:
        orphaned.extend(delete_assets(asset_paths(item)))

    deleted = item_store.delete_items_for_trip(db, trip_id)
    found = trip_store.delete_trip_record(db, trip_id)

    logger.info(
        "trip_cascade_deleted",
        trip_id=trip_id,
        trip_found=found,
        items_deleted=deleted,
        orphaned=len(orphaned),
    )

    return TripDeleteResult(
        trip_found=found,
        items_deleted=deleted,
        orphaned_paths=orphaned,
    )


def find_orphaned_assets(
    db: Session,
    trip_id: str,
    grace: timedelta | None = None,
) -> list[str]:
    """
    Blobs under trips/{trip_id}/items/ that no item references.

    Blobs younger than the grace period are skipped; they may belong to an
    ingestion that has uploaded but not yet persisted its document.
    """
    if grace is None:
        grace = timedelta(minutes=settings.orphan_grace_period_minutes)
    cutoff = utcnow() - grace

    referenced: set[str] = set()
    for item in item_store.list_items(db, trip_id):
        referenced.update(asset_paths(item))

    orphans = [
        stored.path
        for stored in list_paths(f"trips/{trip_id}/items/")
        if stored.path not in referenced
        and (stored.last_modified is None or stored.last_modified <= cutoff)
    ]

    logger.info(
        "orphaned_assets_found",
        trip_id=trip_id,
        referenced=len(referenced),
        orphaned=len(orphans),
    )
    return orphans


def sweep_orphaned_assets(
    db: Session,
    trip_id: str,
    grace: timedelta | None = None,
    dry_run: bool = False,
) -> tuple[list[str], list[str]]:
    """
    Delete unreferenced blobs of a trip.

    Returns:
        (removed, failed) paths; with dry_run nothing is deleted and every
        orphan is reported as removable
    """
    orphans = find_orphaned_assets(db, trip_id, grace)
    if dry_run:
        return orphans, []

    failed = delete_assets(orphans)
    removed = [path for path in orphans if path not in failed]

    logger.info(
        "orphaned_assets_swept",
        trip_id=trip_id,
        removed=len(removed),
        failed=len(failed),
    )
    return removed, failed
