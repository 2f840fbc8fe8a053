"""
Live item feed: push-based full snapshots of a trip's items.

Every committed write on a trip publishes the new ordered snapshot to all
subscribers of that trip. Subscribers always receive the whole list, never
a diff.

The feed lives in one process. Writes made by another worker process or by
the maintenance scripts under scripts/ are not pushed to open streams;
those subscribers see them with the next write made in this process.
"""

import threading
from typing import Callable

from tripmate.logging_config import get_logger
from tripmate.schemas.item import TripItemRead

logger = get_logger(__name__)

SnapshotCallback = Callable[[list[TripItemRead]], None]
SnapshotLoader = Callable[[], list[TripItemRead]]


class Subscription:
    """Handle returned by ItemFeed.subscribe; close() stops delivery."""

    def __init__(self, feed: "ItemFeed", trip_id: str, callback: SnapshotCallback):
        self._feed = feed
        self.trip_id = trip_id
        self.callback = callback
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, snapshot: list[TripItemRead]) -> None:
        if self._closed:
            return
        try:
            self.callback(snapshot)
        except Exception as e:
            logger.error(
                "item_feed_callback_failed",
                trip_id=self.trip_id,
                error=str(e),
                exc_info=True,
            )

    def close(self) -> None:
        """Stop further deliveries. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        self._feed._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ItemFeed:
    """
    Process-wide fan-out of item snapshots, keyed by trip.

    Delivery is synchronous on the publishing thread, after the store has
    committed the write. Loading a snapshot and handing it out happen under
    one per-trip lock, so the last snapshot a subscriber receives is always
    loaded after the last committed write.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._subscribers: dict[str, list[Subscription]] = {}
        self._trip_locks: dict[str, threading.RLock] = {}

    def _trip_lock(self, trip_id: str) -> threading.RLock:
        with self._lock:
            lock = self._trip_locks.get(trip_id)
            if lock is None:
                lock = self._trip_locks[trip_id] = threading.RLock()
            return lock

    def subscribe(
        self,
        trip_id: str,
        callback: SnapshotCallback,
        load_snapshot: SnapshotLoader,
    ) -> Subscription:
        """
        Register callback and hand it the current snapshot immediately.

        The initial load happens under the trip lock so no publish can slip
        in between registration and the first delivery.
        """
        subscription = Subscription(self, trip_id, callback)
        with self._trip_lock(trip_id):
            with self._lock:
                self._subscribers.setdefault(trip_id, []).append(subscription)
            try:
                snapshot = load_snapshot()
            except Exception:
                subscription.close()
                raise
            subscription.deliver(snapshot)
        logger.debug("item_feed_subscribed", trip_id=trip_id)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscribers.get(subscription.trip_id, [])
            if subscription in subscribers:
                subscribers.remove(subscription)
            if not subscribers:
                self._subscribers.pop(subscription.trip_id, None)
        logger.debug("item_feed_unsubscribed", trip_id=subscription.trip_id)

    def has_subscribers(self, trip_id: str) -> bool:
        with self._lock:
            return bool(self._subscribers.get(trip_id))

    def subscriber_count(self, trip_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(trip_id, []))

    def publish(self, trip_id: str, load_snapshot: SnapshotLoader) -> None:
        """
        Load the current snapshot and deliver it to every subscriber of trip_id.

        Concurrent publishers on the same trip are serialized, so a snapshot
        loaded earlier is never delivered after one loaded later. Errors
        raised by load_snapshot propagate to the caller.
        """
        with self._trip_lock(trip_id):
            with self._lock:
                subscribers = list(self._subscribers.get(trip_id, []))
            if not subscribers:
                return
            snapshot = load_snapshot()
            for subscription in subscribers:
                subscription.deliver(snapshot)
        logger.debug(
            "item_feed_published",
            trip_id=trip_id,
            subscribers=len(subscribers),
            items=len(snapshot),
        )

    def clear(self) -> None:
        """Close every subscription (used on shutdown and in tests)."""
        with self._lock:
            subscriptions = [s for subs in self._subscribers.values() for s in subs]
        for subscription in subscriptions:
            subscription.close()
        with self._lock:
            self._trip_locks.clear()


# Global feed instance
item_feed = ItemFeed()
