"""
Trip storage operations.

Handles trip creation, lookup, partial updates and the per-user default trip.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tripmate.config import settings
from tripmate.database import utcnow
from tripmate.errors import NotFoundError, StoreUnavailableError
from tripmate.logging_config import get_logger
from tripmate.models import Trip
from tripmate.schemas.trip import TripCreate

logger = get_logger(__name__)

# Fields a PATCH may touch; id, created_by and created_at are immutable
PATCHABLE_FIELDS = {
    "trip_name", "total_budget", "start_date", "end_date", "currency", "member_count",
}


def effective_member_count(trip: Trip | None) -> int:
    """Split divisor for a trip; 0, negative or missing counts read as 1."""
    if trip is None or not trip.member_count or trip.member_count < 1:
        return 1
    return trip.member_count


def get_trip_by_id(db: Session, trip_id: str) -> Trip | None:
    """Get trip by ID."""
    try:
        return db.query(Trip).filter(Trip.id == trip_id).first()
    except SQLAlchemyError as e:
        logger.error("get_trip_failed", trip_id=trip_id, error=str(e))
        raise StoreUnavailableError("Failed to get trip", trip_id=trip_id) from e


def get_user_trips(db: Session, user_id: str) -> list[Trip]:
    """
    Get trips owned by a user, newest first.

    Args:
        db: Database session
        user_id: Owner identifier

    Returns:
        List of Trip objects
    """
    try:
        return (
            db.query(Trip)
            .filter(Trip.created_by == user_id)
            .order_by(Trip.created_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("get_user_trips_failed", user_id=user_id, error=str(e))
        raise StoreUnavailableError("Failed to get trips", user_id=user_id) from e


def create_trip(db: Session, data: TripCreate) -> Trip:
    """
    Create a new trip.

    Args:
        db: Database session
        data: Validated trip payload

    Returns:
        The persisted Trip with its store-assigned id
    """
    now = utcnow()
    trip = Trip(
        trip_name=data.trip_name,
        total_budget=data.total_budget,
        start_date=data.start_date,
        end_date=data.end_date,
        currency=data.currency,
        member_count=data.member_count,
        created_by=data.created_by,
        created_at=now,
        updated_at=now,
    )

    try:
        db.add(trip)
        db.commit()
        db.refresh(trip)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("create_trip_failed", user_id=data.created_by, error=str(e), exc_info=True)
        raise StoreUnavailableError("Failed to create trip") from e

    logger.info(
        "trip_created",
        trip_id=trip.id,
        user_id=trip.created_by,
        name=trip.trip_name,
        member_count=trip.member_count,
    )

    return trip


def patch_trip(db: Session, trip_id: str, **updates: Any) -> Trip:
    """
    Update a subset of trip fields.

    Unknown and immutable fields are ignored.

    Raises:
        NotFoundError: If the trip does not exist
    """
    trip = get_trip_by_id(db, trip_id)
    if trip is None:
        raise NotFoundError("Trip not found", trip_id=trip_id)

    applied = []
    for name, value in updates.items():
        if name in PATCHABLE_FIELDS:
            setattr(trip, name, value)
            applied.append(name)
    trip.updated_at = utcnow()

    try:
        db.commit()
        db.refresh(trip)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("patch_trip_failed", trip_id=trip_id, error=str(e))
        raise StoreUnavailableError("Failed to update trip", trip_id=trip_id) from e

    logger.info("trip_updated", trip_id=trip_id, fields=applied)

    return trip


def get_or_create_default_trip(db: Session, user_id: str) -> Trip:
    """
    Return the user's default trip, creating it on first use.

    The default trip is found by owner + configured default name.
    """
    try:
        trip = (
            db.query(Trip)
            .filter(
                Trip.created_by == user_id,
                Trip.trip_name == settings.default_trip_name,
            )
            .order_by(Trip.created_at.asc())
            .first()
        )
    except SQLAlchemyError as e:
        logger.error("default_trip_lookup_failed", user_id=user_id, error=str(e))
        raise StoreUnavailableError("Failed to get default trip", user_id=user_id) from e

    if trip is not None:
        return trip

    now = utcnow()
    logger.info("default_trip_missing", user_id=user_id)
    return create_trip(
        db,
        TripCreate(
            trip_name=settings.default_trip_name,
            total_budget=settings.default_trip_budget,
            start_date=now,
            currency=settings.default_trip_currency,
            member_count=1,
            created_by=user_id,
        ),
    )


def delete_trip_record(db: Session, trip_id: str) -> bool:
    """
    Delete the trip document only. Returns False if it did not exist.

    Callers delete the trip's items first (see item_lifecycle.delete_trip_cascade).
    """
    trip = get_trip_by_id(db, trip_id)
    if trip is None:
        return False

    try:
        db.delete(trip)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("delete_trip_failed", trip_id=trip_id, error=str(e))
        raise StoreUnavailableError("Failed to delete trip", trip_id=trip_id) from e

    logger.info("trip_deleted", trip_id=trip_id)
    return True
