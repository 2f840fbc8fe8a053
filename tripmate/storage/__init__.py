"""
Storage layer: document store (trips, items), live item feed and object storage.
"""

from tripmate.storage.item_feed import ItemFeed, Subscription, item_feed
from tripmate.storage.item_store import (
    ItemDeleteResult,
    create_item,
    delete_item_record,
    delete_items_for_trip,
    get_item,
    list_items,
    replace_item,
    subscribe,
)
from tripmate.storage.trip_store import (
    create_trip,
    delete_trip_record,
    effective_member_count,
    get_or_create_default_trip,
    get_trip_by_id,
    get_user_trips,
    patch_trip,
)

__all__ = [
    # Live feed
    "ItemFeed",
    "Subscription",
    "item_feed",
    # Items
    "ItemDeleteResult",
    "create_item",
    "delete_item_record",
    "delete_items_for_trip",
    "get_item",
    "list_items",
    "replace_item",
    "subscribe",
    # Trips
    "create_trip",
    "delete_trip_record",
    "effective_member_count",
    "get_or_create_default_trip",
    "get_trip_by_id",
    "get_user_trips",
    "patch_trip",
]
