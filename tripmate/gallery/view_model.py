"""
Gallery / dashboard view model.

Holds the latest item snapshot pushed by the live feed plus UI-only state:
filters, the open detail view, a pending delete and an in-progress preview.
It never mutates the item list itself; every change comes back through a
new snapshot.
"""

from dataclasses import dataclass
from typing import Any, Callable

from tripmate.errors import TripMateError
from tripmate.gallery.stats import TripStats, compute_trip_stats
from tripmate.logging_config import get_logger
from tripmate.models import ITEM_CATEGORIES
from tripmate.schemas.item import TripItemCreate, TripItemRead

logger = get_logger(__name__)

FILTERS = ("all", "expense", "memory")


def item_media(item: TripItemRead) -> list[str]:
    """Navigable assets of an item: the video alone, else image then siblings."""
    if item.video_url:
        return [item.video_url]
    if item.image_url:
        return [item.image_url, *item.images]
    return list(item.images)


@dataclass
class DetailView:
    item_id: str
    asset_index: int = 0


class GalleryViewModel:
    """
    Derived views over a trip's items.

    on_snapshot has the subscription callback signature, so the view model
    can be subscribed to the item feed directly.
    """

    def __init__(self, member_count: int | None = 1):
        self.member_count = member_count
        self.items: list[TripItemRead] = []
        self.filter = "all"
        self.category_filter: str | None = None
        self.detail: DetailView | None = None
        self.pending_delete_id: str | None = None
        self.preview: TripItemCreate | None = None
        self.last_error: str | None = None

    # ─────────────────────────────────────────────────────────────────────
    # Snapshot
    # ─────────────────────────────────────────────────────────────────────

    def on_snapshot(self, items: list[TripItemRead]) -> None:
        self.items = list(items)
        ids = {item.id for item in self.items}

        if self.detail is not None and self.detail.item_id not in ids:
            logger.debug("detail_closed_item_removed", item_id=self.detail.item_id)
            self.detail = None
        if self.pending_delete_id is not None and self.pending_delete_id not in ids:
            self.pending_delete_id = None

    def _find(self, item_id: str) -> TripItemRead | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # ─────────────────────────────────────────────────────────────────────
    # Filters
    # ─────────────────────────────────────────────────────────────────────

    def set_filter(self, value: str) -> None:
        """Switch the primary filter; anything but 'all' drops the category."""
        if value not in FILTERS:
            raise ValueError(f"Unknown filter: {value}")
        self.filter = value
        if value != "all":
            self.category_filter = None

    def toggle_category(self, category: str) -> None:
        """Select a category (resets the primary filter) or unselect it."""
        if category not in ITEM_CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        if self.category_filter == category:
            self.category_filter = None
        else:
            self.category_filter = category
        self.filter = "all"

    @property
    def visible_items(self) -> list[TripItemRead]:
        """Items passing both filters, newest event first."""
        visible = [
            item
            for item in self.items
            if (self.filter == "all" or item.type == self.filter)
            and (self.category_filter is None or item.category == self.category_filter)
        ]
        return sorted(visible, key=lambda item: item.timestamp, reverse=True)

    @property
    def stats(self) -> TripStats:
        return compute_trip_stats(self.items, self.member_count)

    # ─────────────────────────────────────────────────────────────────────
    # Delete flow
    # ─────────────────────────────────────────────────────────────────────

    def request_delete(self, item_id: str) -> None:
        self.pending_delete_id = item_id
        self.last_error = None

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    def confirm_delete(self, deleter: Callable[[str], Any]) -> bool:
        """
        Run the confirmed delete through the store.

        The item stays in view until the next snapshot drops it. On a store
        error the message lands in last_error and nothing else changes.

        Returns:
            True if the store accepted the delete
        """
        item_id = self.pending_delete_id
        if item_id is None:
            return False

        try:
            deleter(item_id)
        except TripMateError as e:
            logger.warning("gallery_delete_failed", item_id=item_id, error=e.message)
            self.last_error = e.message
            return False

        self.pending_delete_id = None
        self.last_error = None
        if self.detail is not None and self.detail.item_id == item_id:
            self.detail = None
        return True

    # ─────────────────────────────────────────────────────────────────────
    # Preview flow (confirm an analyzed item before saving it)
    # ─────────────────────────────────────────────────────────────────────

    def begin_preview(self, draft: TripItemCreate) -> None:
        self.preview = draft
        self.last_error = None

    def edit_preview(self, **fields: Any) -> TripItemCreate:
        """Apply user edits to the draft; values go through item validation."""
        if self.preview is None:
            raise ValueError("No preview in progress")
        self.preview = TripItemCreate.model_validate({**self.preview.model_dump(), **fields})
        return self.preview

    def confirm_preview(self, saver: Callable[[TripItemCreate], Any]) -> bool:
        if self.preview is None:
            return False
        try:
            saver(self.preview)
        except TripMateError as e:
            logger.warning("gallery_preview_save_failed", error=e.message)
            self.last_error = e.message
            return False
        self.preview = None
        self.last_error = None
        return True

    def cancel_preview(self) -> None:
        self.preview = None

    # ─────────────────────────────────────────────────────────────────────
    # Detail navigation
    # ─────────────────────────────────────────────────────────────────────

    @property
    def media_items(self) -> list[TripItemRead]:
        return [item for item in self.visible_items if item_media(item)]

    def open_detail(self, item_id: str) -> None:
        if self._find(item_id) is None:
            raise ValueError(f"Unknown item: {item_id}")
        self.detail = DetailView(item_id=item_id)

    def close_detail(self) -> None:
        self.detail = None

    @property
    def current_item(self) -> TripItemRead | None:
        if self.detail is None:
            return None
        return self._find(self.detail.item_id)

    @property
    def current_asset(self) -> str | None:
        item = self.current_item
        if item is None:
            return None
        media = item_media(item)
        if not media:
            return None
        return media[min(self.detail.asset_index, len(media) - 1)]

    def _position(self) -> tuple[list[TripItemRead], int]:
        media_items = self.media_items
        for index, item in enumerate(media_items):
            if item.id == self.detail.item_id:
                return media_items, index
        return media_items, -1

    def next_asset(self) -> bool:
        """Next sibling of the open item, else the next item. No wrap."""
        item = self.current_item
        if item is None:
            return False

        if self.detail.asset_index < len(item_media(item)) - 1:
            self.detail.asset_index += 1
            return True

        media_items, index = self._position()
        if 0 <= index < len(media_items) - 1:
            self.detail = DetailView(item_id=media_items[index + 1].id)
            return True
        return False

    def previous_asset(self) -> bool:
        """Previous sibling of the open item, else the previous item. No wrap."""
        item = self.current_item
        if item is None:
            return False

        if self.detail.asset_index > 0:
            self.detail.asset_index -= 1
            return True

        media_items, index = self._position()
        if index > 0:
            self.detail = DetailView(item_id=media_items[index - 1].id)
            return True
        return False
