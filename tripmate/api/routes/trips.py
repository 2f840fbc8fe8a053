"""
Trip endpoints: list, create, fetch, patch, cascade delete and dashboard.

Thin layer over the trip store and item lifecycle services.
"""

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from tripmate.api.deps import DbSession
from tripmate.errors import NotFoundError, ValidationError
from tripmate.gallery.stats import compute_trip_stats, dashboard_payload
from tripmate.logging_config import get_logger
from tripmate.schemas.trip import DefaultTripRequest, TripCreate, TripRead, TripUpdate
from tripmate.services.item_lifecycle import delete_trip_cascade
from tripmate.storage import item_store, trip_store

logger = get_logger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def serialize_trip(trip) -> dict:
    return TripRead.model_validate(trip).model_dump(mode="json", by_alias=True)


@router.get("")
def list_trips(db: DbSession, user_id: str | None = Query(default=None, alias="userId")) -> dict:
    """Trips owned by userId, newest first."""
    if not user_id:
        raise ValidationError("Missing userId")

    trips = trip_store.get_user_trips(db, user_id)
    return {"trips": [serialize_trip(trip) for trip in trips]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_trip(payload: TripCreate, db: DbSession) -> dict:
    """Create a trip; every field except endDate is required."""
    trip = trip_store.create_trip(db, payload)
    return {"tripId": trip.id}


@router.post("/default")
def default_trip(payload: DefaultTripRequest, db: DbSession) -> dict:
    """Get or lazily create the user's default trip."""
    trip = trip_store.get_or_create_default_trip(db, payload.user_id)
    return {"tripId": trip.id}


@router.get("/{trip_id}")
def get_trip(trip_id: str, db: DbSession) -> dict:
    trip = trip_store.get_trip_by_id(db, trip_id)
    if trip is None:
        raise NotFoundError("Trip not found", trip_id=trip_id)
    return {"trip": serialize_trip(trip)}


@router.patch("/{trip_id}")
def update_trip(trip_id: str, payload: TripUpdate, db: DbSession) -> dict:
    """Partial update; only the fields present in the body are written."""
    trip_store.patch_trip(db, trip_id, **payload.model_dump(exclude_unset=True, exclude_none=True))
    return {"success": True}


@router.delete("/{trip_id}")
def delete_trip(trip_id: str, db: DbSession) -> JSONResponse:
    """Delete the trip's items (with assets) and then the trip."""
    result = delete_trip_cascade(db, trip_id)
    return JSONResponse(result.to_response())


@router.get("/{trip_id}/dashboard")
def trip_dashboard(trip_id: str, db: DbSession) -> dict:
    """Expense totals, per-category sums, per-person split and budget status."""
    trip = trip_store.get_trip_by_id(db, trip_id)
    if trip is None:
        raise NotFoundError("Trip not found", trip_id=trip_id)

    items = item_store.list_items(db, trip_id)
    stats = compute_trip_stats(items, trip_store.effective_member_count(trip))
    return dashboard_payload(stats, trip.total_budget)
