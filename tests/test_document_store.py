"""Tests for the in-memory document store and subscriptions."""
import time
from datetime import datetime, timedelta, timezone
import pytest
from library_tracker.document_store import InMemoryDocumentStore, SERVER_TIMESTAMP, Subscription
from library_tracker.errors import DocumentNotFoundError


def make_clock():
    """Clock that advances one second per call."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = iter(range(1000))
    return lambda: start + timedelta(seconds=next(ticks))


def test_add_resolves_server_timestamp():
    """Test that SERVER_TIMESTAMP becomes the store's clock time."""
    store = InMemoryDocumentStore(clock=make_clock())

    doc_id = store.add("books", {"title": "A", "createdAt": SERVER_TIMESTAMP})
    doc = store.query("books", {"title": "A"})[0]

    assert doc.id == doc_id
    assert doc.data["createdAt"] == "2024-01-01T00:00:00+00:00"


def test_query_filters_by_equality():
    """Test that every filter must match."""
    store = InMemoryDocumentStore()
    store.add("books", {"ownerId": "u1", "title": "A"})
    store.add("books", {"ownerId": "u2", "title": "A"})
    store.add("books", {"ownerId": "u1", "title": "B"})
    store.add("films", {"ownerId": "u1", "title": "A"})

    docs = store.query("books", {"ownerId": "u1", "title": "A"})

    assert len(docs) == 1
    assert docs[0].data == {"ownerId": "u1", "title": "A"}


def test_query_order_by_excludes_missing_field():
    """Test ordering and that documents without the field are left out."""
    store = InMemoryDocumentStore()
    store.add("books", {"title": "late", "createdAt": "2024-03-01"})
    store.add("books", {"title": "undated"})
    store.add("books", {"title": "early", "createdAt": "2024-01-01"})

    docs = store.query("books", {}, order_by="createdAt")

    assert [doc.data["title"] for doc in docs] == ["early", "late"]


def test_query_returns_copies():
    """Test that changing a result does not change the store."""
    store = InMemoryDocumentStore()
    store.add("books", {"title": "A"})

    store.query("books", {})[0].data["title"] = "changed"

    assert store.query("books", {})[0].data["title"] == "A"


def test_update_patches_given_fields():
    """Test that update leaves other fields alone."""
    store = InMemoryDocumentStore()
    doc_id = store.add("books", {"title": "A", "isRead": False})

    store.update("books", doc_id, {"isRead": True})

    assert store.query("books", {})[0].data == {"title": "A", "isRead": True}


def test_update_missing_document():
    """Test that updating an unknown id raises."""
    store = InMemoryDocumentStore()

    with pytest.raises(DocumentNotFoundError):
        store.update("books", "nope", {"isRead": True})


def test_delete_missing_document_is_ignored():
    """Test deleting an unknown id is a no-op."""
    store = InMemoryDocumentStore()
    store.add("books", {"title": "A"})

    store.delete("books", "nope")

    assert len(store.query("books", {})) == 1


def test_watch_delivers_initial_and_change_snapshots():
    """Test that every change delivers the full current result."""
    store = InMemoryDocumentStore(clock=make_clock())
    snapshots = []

    store.watch("books", {"ownerId": "u1"}, "createdAt", snapshots.append)
    store.add("books", {"ownerId": "u1", "title": "A", "createdAt": SERVER_TIMESTAMP})
    store.add("books", {"ownerId": "u1", "title": "B", "createdAt": SERVER_TIMESTAMP})

    assert [[doc.data["title"] for doc in snap] for snap in snapshots] == [[], ["A"], ["A", "B"]]


def test_cancel_stops_delivery():
    """Test that no snapshot arrives after cancel."""
    store = InMemoryDocumentStore()
    snapshots = []

    subscription = store.watch("books", {}, callback=snapshots.append)
    subscription.cancel()
    store.add("books", {"title": "A"})

    assert subscription.cancelled
    assert snapshots == [[]]


def test_subscription_without_callback_queues_snapshots():
    """Test draining queued snapshots in order."""
    store = InMemoryDocumentStore()
    subscription = store.watch("books", {})
    store.add("books", {"title": "A"})

    snapshots = list(subscription.drain())

    assert [len(snap) for snap in snapshots] == [0, 1]
    assert list(subscription.drain()) == []


def test_cancel_discards_pending_snapshots():
    """Test that cancelling drops undelivered snapshots."""
    subscription = Subscription("books", {})
    subscription.deliver([])

    subscription.cancel()
    subscription.deliver([])

    assert list(subscription.drain()) == []
    assert len(subscription.pending) == 0


def test_wait_blocks_for_timeout():
    """Test that waiting on a store without a change feed still takes the timeout."""
    store = InMemoryDocumentStore()

    started = time.monotonic()
    handled = store.wait(0.2)

    assert handled == 0
    assert time.monotonic() - started >= 0.2
