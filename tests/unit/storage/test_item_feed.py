"""Unit tests for the in-process item feed."""

import threading
from datetime import datetime

import pytest

from tripmate.schemas.item import TripItemRead
from tripmate.storage.item_feed import ItemFeed


def read_item(item_id: str) -> TripItemRead:
    now = datetime(2025, 3, 1)
    return TripItemRead(
        id=item_id,
        trip_id="t1",
        name=item_id,
        amount=0,
        category="food",
        type="memory",
        created_by="u1",
        timestamp=now,
        created_at=now,
        updated_at=now,
    )


class TestItemFeed:

    def test_subscribe_delivers_initial_snapshot(self):
        feed = ItemFeed()
        received = []

        feed.subscribe("t1", received.append, lambda: [read_item("a")])

        assert [[i.id for i in s] for s in received] == [["a"]]
        assert feed.subscriber_count("t1") == 1

    def test_publish_fans_out_per_trip(self):
        feed = ItemFeed()
        first, second, other = [], [], []
        feed.subscribe("t1", first.append, list)
        feed.subscribe("t1", second.append, list)
        feed.subscribe("t2", other.append, list)

        feed.publish("t1", lambda: [read_item("a")])

        assert len(first) == 2
        assert len(second) == 2
        assert len(other) == 1

    def test_failing_callback_keeps_subscription(self):
        feed = ItemFeed()
        calls = []

        def flaky(snapshot):
            calls.append(snapshot)
            raise RuntimeError("boom")

        subscription = feed.subscribe("t1", flaky, list)
        feed.publish("t1", list)

        assert len(calls) == 2
        assert subscription.closed is False
        assert feed.has_subscribers("t1")

    def test_failed_initial_load_leaves_no_subscriber(self):
        feed = ItemFeed()

        def broken_load():
            raise ConnectionError("store down")

        with pytest.raises(ConnectionError):
            feed.subscribe("t1", lambda s: None, broken_load)

        assert feed.has_subscribers("t1") is False

    def test_close_via_context_manager(self):
        feed = ItemFeed()

        with feed.subscribe("t1", lambda s: None, list) as subscription:
            assert feed.subscriber_count("t1") == 1

        assert subscription.closed is True
        assert feed.subscriber_count("t1") == 0

    def test_clear_closes_everything(self):
        feed = ItemFeed()
        subscription = feed.subscribe("t1", lambda s: None, list)

        feed.clear()

        assert subscription.closed is True
        assert feed.has_subscribers("t1") is False

    def test_publish_without_subscribers_skips_load(self):
        feed = ItemFeed()
        loads = []

        feed.publish("t1", lambda: loads.append(1) or [])

        assert loads == []

    def test_concurrent_publishers_deliver_latest_snapshot_last(self):
        feed = ItemFeed()
        received = []
        store = []
        feed.subscribe("t1", received.append, lambda: list(store))

        first_loading = threading.Event()
        release_first = threading.Event()

        def slow_load():
            snapshot = list(store)
            first_loading.set()
            release_first.wait(timeout=5)
            return snapshot

        store.insert(0, read_item("a"))
        first = threading.Thread(target=feed.publish, args=("t1", slow_load))
        first.start()
        assert first_loading.wait(timeout=5)

        store.insert(0, read_item("b"))
        second = threading.Thread(target=feed.publish, args=("t1", lambda: list(store)))
        second.start()
        second.join(timeout=0.2)
        assert second.is_alive()

        release_first.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert [[i.id for i in s] for s in received] == [[], ["a"], ["b", "a"]]
