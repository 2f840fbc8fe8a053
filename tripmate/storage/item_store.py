"""
Trip item storage operations.

Items are append-mostly documents scoped to a trip. Every committed write
publishes a fresh ordered snapshot to the live item feed.
"""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripmate.database import utcnow
from tripmate.errors import NotFoundError, StoreUnavailableError
from tripmate.logging_config import get_logger
from tripmate.models import TripItem
from tripmate.schemas.item import TripItemCreate, TripItemRead
from tripmate.storage.item_feed import SnapshotCallback, Subscription, item_feed

logger = get_logger(__name__)

# Fields that a full-document overwrite may replace
REPLACEABLE_FIELDS = (
    "name", "amount", "category", "type", "description",
    "image_url", "thumbnail_url", "blur_data_url", "video_url", "images",
    "storage_path", "thumbnail_path", "timestamp",
)


@dataclass
class ItemDeleteResult:
    """Result of an item delete. Deleting a missing item is still a success."""
    success: bool = True
    already_deleted: bool = False
    partially_deleted: bool = False
    orphaned_paths: list[str] = field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": self.success,
            "alreadyDeleted": self.already_deleted,
        }
        if self.partially_deleted:
            body["partiallyDeleted"] = True
            body["orphanedPaths"] = self.orphaned_paths
        return body


def to_snapshot(items: list[TripItem]) -> list[TripItemRead]:
    """Detach ORM rows into read models for delivery outside the session."""
    return [TripItemRead.model_validate(item) for item in items]


def _query_items(db: Session, trip_id: str) -> list[TripItem]:
    return (
        db.query(TripItem)
        .filter(TripItem.trip_id == trip_id)
        .order_by(TripItem.timestamp.desc(), TripItem.created_at.desc())
        .all()
    )


def _publish(db: Session, trip_id: str) -> None:
    if not item_feed.has_subscribers(trip_id):
        return
    try:
        item_feed.publish(trip_id, lambda: to_snapshot(_query_items(db, trip_id)))
    except SQLAlchemyError as e:
        # The write itself is committed; subscribers catch up on the next one
        logger.error("item_feed_snapshot_failed", trip_id=trip_id, error=str(e))


def list_items(db: Session, trip_id: str) -> list[TripItem]:
    """
    Get all items of a trip, most recent event first.

    Args:
        db: Database session
        trip_id: Trip ID

    Returns:
        Ordered list of TripItem (empty for a trip without items)
    """
    try:
        return _query_items(db, trip_id)
    except SQLAlchemyError as e:
        logger.error("list_items_failed", trip_id=trip_id, error=str(e))
        raise StoreUnavailableError("Failed to load items", trip_id=trip_id) from e


def get_item(db: Session, trip_id: str, item_id: str) -> TripItem | None:
    """Point lookup of one item inside a trip."""
    try:
        return (
            db.query(TripItem)
            .filter(TripItem.trip_id == trip_id, TripItem.id == item_id)
            .first()
        )
    except SQLAlchemyError as e:
        logger.error("get_item_failed", trip_id=trip_id, item_id=item_id, error=str(e))
        raise StoreUnavailableError("Failed to load item", trip_id=trip_id) from e


def create_item(db: Session, trip_id: str, data: TripItemCreate) -> TripItem:
    """
    Append a new item under a trip.

    The trip is not required to exist: like a document-store subcollection,
    writes under an unknown trip id are accepted.

    Args:
        db: Database session
        trip_id: Owning trip ID
        data: Validated item payload

    Returns:
        The persisted TripItem with its store-assigned id
    """
    now = utcnow()
    item = TripItem(
        trip_id=trip_id,
        name=data.name,
        amount=data.amount or 0,
        category=data.category,
        type=data.type,
        description=data.description or "",
        image_url=data.image_url,
        thumbnail_url=data.thumbnail_url,
        blur_data_url=data.blur_data_url,
        video_url=data.video_url,
        images=list(data.images),
        storage_path=data.storage_path,
        thumbnail_path=data.thumbnail_path,
        created_by=data.created_by,
        timestamp=data.timestamp or now,
        created_at=now,
        updated_at=now,
    )

    try:
        db.add(item)
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("create_item_failed", trip_id=trip_id, error=str(e), exc_info=True)
        raise StoreUnavailableError("Failed to save item", trip_id=trip_id) from e

    logger.info(
        "item_created",
        trip_id=trip_id,
        item_id=item.id,
        type=item.type,
        category=item.category,
        amount=item.amount,
    )

    _publish(db, trip_id)
    return item


def replace_item(
    db: Session,
    trip_id: str,
    item_id: str,
    data: TripItemCreate,
) -> TripItem:
    """
    Overwrite an item's document (edit flow).

    id, trip_id, created_by and created_at are preserved.

    Raises:
        NotFoundError: If the item does not exist
    """
    item = get_item(db, trip_id, item_id)
    if item is None:
        raise NotFoundError("Item not found", trip_id=trip_id, item_id=item_id)

    for name in REPLACEABLE_FIELDS:
        value = getattr(data, name)
        if name == "timestamp" and value is None:
            continue
        if name == "images":
            value = list(value)
        setattr(item, name, value)
    item.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("replace_item_failed", trip_id=trip_id, item_id=item_id, error=str(e))
        raise StoreUnavailableError("Failed to update item", trip_id=trip_id) from e

    logger.info("item_replaced", trip_id=trip_id, item_id=item_id)

    _publish(db, trip_id)
    return item


def delete_item_record(db: Session, trip_id: str, item_id: str) -> ItemDeleteResult:
    """
    Delete an item document. Idempotent: a missing item is reported as
    already deleted rather than as an error.
    """
    item = get_item(db, trip_id, item_id)
    if item is None:
        logger.info("item_already_deleted", trip_id=trip_id, item_id=item_id)
        return ItemDeleteResult(already_deleted=True)

    try:
        db.delete(item)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("delete_item_failed", trip_id=trip_id, item_id=item_id, error=str(e))
        raise StoreUnavailableError("Failed to delete item", trip_id=trip_id) from e

    logger.info("item_deleted", trip_id=trip_id, item_id=item_id)

    _publish(db, trip_id)
    return ItemDeleteResult()


def delete_items_for_trip(db: Session, trip_id: str) -> int:
    """Delete every item document of a trip. Returns the number removed."""
    try:
        count = db.query(TripItem).filter(TripItem.trip_id == trip_id).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("delete_trip_items_failed", trip_id=trip_id, error=str(e))
        raise StoreUnavailableError("Failed to delete items", trip_id=trip_id) from e

    logger.info("trip_items_deleted", trip_id=trip_id, count=count)

    _publish(db, trip_id)
    return count


def list_items_missing_thumbnails(db: Session, limit: int | None = None) -> list[TripItem]:
    """Items across all trips that have an image but no thumbnail yet."""
    try:
        query = (
            db.query(TripItem)
            .filter(TripItem.image_url.isnot(None), TripItem.thumbnail_url.is_(None))
            .order_by(TripItem.created_at.asc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()
    except SQLAlchemyError as e:
        logger.error("list_items_missing_thumbnails_failed", error=str(e))
        raise StoreUnavailableError("Failed to load items") from e


def update_item_assets(db: Session, item: TripItem, **assets: Any) -> TripItem:
    """Patch asset fields (thumbnail backfill). Not used by the edit flow."""
    for name, value in assets.items():
        setattr(item, name, value)
    item.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(item)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("update_item_assets_failed", item_id=item.id, error=str(e))
        raise StoreUnavailableError("Failed to update item", item_id=item.id) from e

    _publish(db, item.trip_id)
    return item


def subscribe(db: Session, trip_id: str, on_change: SnapshotCallback) -> Subscription:
    """
    Open a live feed for a trip's items.

    on_change is called immediately with the current ordered snapshot and
    again with the full new snapshot after every later write on the trip.

    Returns:
        Subscription whose close() is idempotent
    """
    return item_feed.subscribe(
        trip_id,
        on_change,
        lambda: to_snapshot(list_items(db, trip_id)),
    )
