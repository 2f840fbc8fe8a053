"""
Trip item endpoints.

CRUD over a trip's items, batch ingestion of uploaded files and a
Server-Sent Events stream of live item snapshots.
"""

import asyncio
import json
from typing import Annotated, AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, File, Form, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from tripmate.api.deps import DbSession, IngestionPipeline
from tripmate.errors import NotFoundError, ValidationError
from tripmate.logging_config import get_logger
from tripmate.schemas.item import TripItemCreate, TripItemRead
from tripmate.services.ingestion import SelectedFile
from tripmate.services.item_lifecycle import delete_item_with_assets
from tripmate.storage import item_store
from tripmate.storage.item_feed import Subscription

logger = get_logger(__name__)

router = APIRouter(prefix="/trips/{trip_id}/items", tags=["items"])

# Seconds between keep-alive comments on an idle stream
STREAM_KEEPALIVE_SECONDS = 15

# Matches trip_item.created_by
MAX_CREATED_BY_LENGTH = 128


def serialize_item(item) -> dict:
    return TripItemRead.model_validate(item).model_dump(mode="json", by_alias=True)


def snapshot_event(snapshot: list[TripItemRead]) -> str:
    payload = {"items": [item.model_dump(mode="json", by_alias=True) for item in snapshot]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@router.get("")
def list_items(trip_id: str, db: DbSession) -> dict:
    """All items of the trip, most recent event first."""
    items = item_store.list_items(db, trip_id)
    return {"items": [serialize_item(item) for item in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_item(trip_id: str, payload: TripItemCreate, db: DbSession) -> dict:
    """Create an item; name, category, type and createdBy are required."""
    item = item_store.create_item(db, trip_id, payload)
    return {"itemId": item.id}


async def open_item_stream(db: Session, trip_id: str) -> tuple[Subscription, asyncio.Queue]:
    """
    Subscribe to the trip's feed and bridge its snapshots onto the event loop.

    The initial snapshot query runs in the threadpool; it is already queued
    when this returns.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(snapshot: list[TripItemRead]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, snapshot)

    subscription = await run_in_threadpool(item_store.subscribe, db, trip_id, on_change)
    logger.info("item_stream_opened", trip_id=trip_id)
    return subscription, queue


async def snapshot_events(
    subscription: Subscription,
    queue: asyncio.Queue,
    is_disconnected: Callable[[], Awaitable[bool]],
    keepalive_seconds: float = STREAM_KEEPALIVE_SECONDS,
) -> AsyncIterator[str]:
    """SSE frames for queued snapshots until the client goes away."""
    try:
        while not await is_disconnected():
            try:
                snapshot = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield snapshot_event(snapshot)
    finally:
        subscription.close()
        logger.info("item_stream_closed", trip_id=subscription.trip_id)


@router.get("/stream")
async def stream_items(trip_id: str, request: Request, db: DbSession) -> StreamingResponse:
    """
    Live item feed as Server-Sent Events.

    The first event carries the current snapshot; every write on the trip
    pushes the full new snapshot.
    """
    subscription, queue = await open_item_stream(db, trip_id)
    return StreamingResponse(
        snapshot_events(subscription, queue, request.is_disconnected),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.post("/batch")
def ingest_batch(
    trip_id: str,
    pipeline: IngestionPipeline,
    files: Annotated[list[UploadFile], File()],
    created_by: Annotated[str, Form(alias="createdBy")],
) -> dict:
    """
    Ingest uploaded photos/videos one by one.

    Per-file failures do not fail the request; they are counted in the
    returned summary.
    """
    if not created_by:
        raise ValidationError("Missing createdBy")
    if len(created_by) > MAX_CREATED_BY_LENGTH:
        raise ValidationError("createdBy is too long")

    selected = [
        SelectedFile(
            filename=upload.filename or "file",
            content_type=upload.content_type or "application/octet-stream",
            data=upload.file.read(),
        )
        for upload in files
    ]
    summary = pipeline.ingest_batch(trip_id, selected, created_by)
    return summary.to_response()


@router.get("/{item_id}")
def get_item(trip_id: str, item_id: str, db: DbSession) -> dict:
    item = item_store.get_item(db, trip_id, item_id)
    if item is None:
        raise NotFoundError("Item not found", trip_id=trip_id, item_id=item_id)
    return {"item": serialize_item(item)}


@router.put("/{item_id}")
def replace_item(trip_id: str, item_id: str, payload: TripItemCreate, db: DbSession) -> dict:
    """Overwrite the item document (edit flow)."""
    item_store.replace_item(db, trip_id, item_id, payload)
    return {"success": True}


@router.delete("/{item_id}")
def delete_item(trip_id: str, item_id: str, db: DbSession) -> JSONResponse:
    """Delete the item's assets and then its document; idempotent."""
    result = delete_item_with_assets(db, trip_id, item_id)
    return JSONResponse(result.to_response())
