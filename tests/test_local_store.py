"""Tests for local storage."""
import json
import pytest
from library_tracker.library import Library
from library_tracker.local_store import KeyValueStore, LocalAdapter
from library_tracker.models import Book


def make_adapter(tmp_path):
    return LocalAdapter(KeyValueStore(tmp_path / "storage.json"))


def test_key_value_store_items(tmp_path):
    """Test setting, reading and removing string values."""
    store = KeyValueStore(tmp_path / "nested" / "storage.json")

    assert store.get_item("library") is None

    store.set_item("library", "[]")
    store.set_item("other", "x")

    assert store.get_item("library") == "[]"
    store.remove_item("library")
    assert store.get_item("library") is None
    assert store.get_item("other") == "x"


def test_restore_without_stored_value(tmp_path):
    """Test that nothing stored restores an empty library."""
    library = make_adapter(tmp_path).restore()

    assert isinstance(library, Library)
    assert len(library) == 0


def test_save_restore_round_trip(tmp_path):
    """Test that restore reproduces the saved records and order."""
    adapter = make_adapter(tmp_path)
    library = Library([
        Book("Dune", "Herbert", "412", False),
        Book("Emma", "Austen", "474", True),
        Book("Beloved", "Morrison", "324", False),
    ])

    adapter.save(library)
    restored = adapter.restore()

    assert restored.books == library.books


def test_save_restore_empty_library(tmp_path):
    """Test the round trip for an empty library."""
    adapter = make_adapter(tmp_path)

    adapter.save(Library())

    assert len(adapter.restore()) == 0


def test_save_overwrites_previous_value(tmp_path):
    """Test that each save replaces the stored array under one key."""
    adapter = make_adapter(tmp_path)

    adapter.save(Library([Book("A"), Book("B")]))
    adapter.save(Library([Book("C")]))

    stored = json.loads(adapter.store.get_item("library"))
    assert stored == [{"title": "C", "author": "Unknown", "pages": "0", "isRead": False}]


def test_restore_fills_defaults(tmp_path):
    """Test that records missing fields are rebuilt with defaults."""
    adapter = make_adapter(tmp_path)
    adapter.store.set_item("library", '[{"title": "Dune", "isRead": true}]')

    library = adapter.restore()

    assert library.books == [Book("Dune", "Unknown", "0", True)]


def test_restore_malformed_value(tmp_path):
    """Test that a corrupt stored value raises."""
    adapter = make_adapter(tmp_path)
    adapter.store.set_item("library", "{oops")

    with pytest.raises(json.JSONDecodeError):
        adapter.restore()


def test_custom_key(tmp_path):
    """Test that the adapter only touches its own key."""
    store = KeyValueStore(tmp_path / "storage.json")
    LocalAdapter(store, "shelf").save(Library([Book("A")]))

    assert store.get_item("library") is None
    assert len(LocalAdapter(store, "shelf").restore()) == 1
